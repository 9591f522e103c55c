"""Name collapsed clusters and build the population reassignment table."""

from dataclasses import dataclass, field
from typing import List, Tuple

from rich.console import Console
from rich.markup import escape

console = Console()

NAME_SEPARATOR = '-'


@dataclass
class Grouping:
    """A multi-member cluster and the synthetic group name it receives."""
    name: str
    members: List[str] = field(default_factory=list)


def group_label(iteration, cluster_index):
    """Synthetic label for the cluster_index-th collapsed cluster of a round."""
    return f"Group_{iteration}.{cluster_index}"


def _naming_key(members):
    """Sort key: longest joined name first, then first member, then the full list.

    ``members[0]`` is the first member in canonical group order, compared
    alphabetically against the other clusters' first members. It is not
    ``min(members)``.
    """
    return (-len(NAME_SEPARATOR.join(members)), members[0], tuple(members))


def name_clusters(clusters, iteration='1'):
    """Assign names to every multi-member cluster.

    Parameters:
        clusters: list of member lists, each in canonical group order
        iteration: Round tag used in the names (``Group_<iteration>.<k>``)

    Returns:
        list of Grouping: Ranked by descending joined-name length, ties broken
        by comparing first members (canonical order) alphabetically.
        Singletons are not included.
    """
    multi = [list(c) for c in clusters if len(c) > 1]
    multi.sort(key=_naming_key)
    return [Grouping(name=group_label(iteration, k), members=members) for k, members in enumerate(multi, start=1)]


def build_reassignment_table(groups, groupings) -> List[Tuple[str, str]]:
    """One (original, new) pair per group, in ``groups`` order.

    Groups outside every grouping map to themselves.
    """
    new_name = {}
    for grouping in groupings:
        for member in grouping.members:
            new_name[member] = grouping.name
    return [(g, new_name.get(g, g)) for g in groups]


def print_groupings(groupings, threshold):
    """Print the POPULATION GROUPINGS report."""
    console.print("\n[bold]POPULATION GROUPINGS[/bold]")
    if not groupings:
        console.print(f"     No populations collapsed at d <= {threshold}")
        return
    for grouping in groupings:
        console.print(f"Group:{escape(grouping.name)}")
        console.print(f"  {escape(', '.join(grouping.members))}")


__all__ = [
    'NAME_SEPARATOR',
    'Grouping',
    'group_label',
    'name_clusters',
    'build_reassignment_table',
    'print_groupings',
]
