"""Population collapse - main orchestrator.

Amalgamates groups whose pairwise distance is at or below a threshold:
1. Normalize the distance matrix (validate labels, mirror the triangle)
2. Build threshold neighbourhoods
3. Resolve them into clusters (transitive closure)
4. Name multi-member clusters and build the reassignment table
5. Write the table and recode the dataset's group labels

``collapse_until_stable`` repeats the round, recomputing distances between
the new groups each time, until nothing more collapses.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape

from popcollapse.config_utils import print_config_summary, validate_config
from popcollapse.core.distances import (
    DEFAULT_EPSILON,
    normalize_distance_matrix,
    read_distance_matrix,
    resolve_threshold,
)
from popcollapse.core.dataset import read_dataset
from popcollapse.core.recode import recode_dataset, write_reassignment_table
from popcollapse.cluster.threshold_graph import threshold_neighbourhoods
from popcollapse.cluster.resolver import resolve_clusters
from popcollapse.cluster.naming import Grouping, build_reassignment_table, name_clusters, print_groupings
from popcollapse.errors import ReassignmentTableWriteError

console = Console()


@dataclass
class CollapseConfig:
    """Configuration for collapsing populations."""

    # Linking
    threshold: float = 0.0
    epsilon: float = DEFAULT_EPSILON
    epsilon_below_threshold: bool = False

    # Naming / output
    iteration: str = '1'
    recode_table: str = 'tmp.csv'

    # Dataset
    group_col: str = 'pop'

    # Iterative collapse
    max_rounds: Optional[int] = None

    # Files (command line only)
    distance_matrix: Optional[str] = None
    dataset: Optional[str] = None
    output: Optional[str] = None

    # 0 silent, 1 brief, 2 verbose
    verbose: int = 1


@dataclass
class CollapseResult:
    """Outcome of one collapse round."""
    dataset: Any
    amalgamated: bool
    threshold: float
    clusters: List[List[str]] = field(default_factory=list)
    groupings: List[Grouping] = field(default_factory=list)
    table: List[Tuple[str, str]] = field(default_factory=list)
    recode_table_path: Optional[str] = None


def compute_clusters(matrix, threshold=0.0, groups=None, epsilon=DEFAULT_EPSILON,
                     epsilon_below_threshold=False, verbose=0):
    """Cluster groups by single linkage at a distance threshold.

    Parameters:
        matrix: Labelled distance matrix (DataFrame), one triangle populated
        threshold: Maximum linking distance; 0 means "equal within epsilon"
        groups: Canonical group order (defaults to the matrix row order)

    Returns:
        tuple: (clusters, effective_threshold) where clusters is a list of
        member lists in canonical group order
    """
    effective = resolve_threshold(threshold, epsilon, epsilon_below_threshold)
    if verbose >= 2 and effective != threshold:
        console.print(f"  Using threshold {effective:g} in place of {threshold:g}")

    sym = normalize_distance_matrix(matrix, groups=groups)
    names = list(sym.index)
    neighbourhoods = threshold_neighbourhoods(sym.to_numpy(), effective)
    return resolve_clusters(neighbourhoods, names, verbose=verbose), effective


def collapse_groups(matrix, dataset, config: Optional[CollapseConfig] = None, **overrides) -> CollapseResult:
    """Collapse the dataset's groups that lie within threshold of one another.

    Parameters:
        matrix: Labelled distance matrix between the dataset's groups
        dataset: Collaborator dataset (group_labels/groups/with_group_labels)
        config: CollapseConfig; keyword overrides replace individual fields

    Returns:
        CollapseResult: ``amalgamated`` is False when nothing merged, in
        which case no table is written and the dataset is returned as is.

    Raises:
        ShapeMismatchError: Matrix labels do not match the dataset groups
        ReassignmentTableWriteError: The table could not be written; the
            computed result is attached as ``result``
    """
    config = _with_overrides(config, overrides)
    verbose = config.verbose

    if verbose >= 2:
        console.print(f"Creating a new population recode table by amalgamating populations for which d <= {config.threshold}")

    groups = dataset.groups()
    clusters, effective = compute_clusters(
        matrix,
        threshold=config.threshold,
        groups=groups,
        epsilon=config.epsilon,
        epsilon_below_threshold=config.epsilon_below_threshold,
        verbose=verbose,
    )
    groupings = name_clusters(clusters, iteration=config.iteration)

    if verbose >= 1:
        print_groupings(groupings, config.threshold)

    if not groupings:
        return CollapseResult(dataset=dataset, amalgamated=False, threshold=effective, clusters=clusters)

    table = build_reassignment_table(groups, groupings)
    result = CollapseResult(
        dataset=recode_dataset(dataset, table),
        amalgamated=True,
        threshold=effective,
        clusters=clusters,
        groupings=groupings,
        table=table,
    )

    try:
        result.recode_table_path = write_reassignment_table(table, config.recode_table)
    except ReassignmentTableWriteError as e:
        e.result = result
        if verbose >= 1:
            console.print(f"  [yellow]⚠[/yellow] {escape(str(e))}")
        raise

    if verbose >= 2:
        console.print(f"  Reassignment table written to {escape(result.recode_table_path)}")
    return result


def round_table_path(recode_table, round_number):
    """Per-round table path: tmp.csv -> tmp_1.csv, tmp_2.csv, ..."""
    path = Path(recode_table)
    return str(path.with_name(f"{path.stem}_{round_number}{path.suffix}"))


def collapse_until_stable(dataset, distance_fn: Callable[[Any], Any], config: Optional[CollapseConfig] = None,
                          **overrides):
    """Collapse repeatedly until a round amalgamates nothing.

    Parameters:
        dataset: Collaborator dataset
        distance_fn: Called with the current dataset, returns the labelled
            distance matrix between its current groups
        config: CollapseConfig; ``max_rounds`` caps the number of rounds

    Returns:
        tuple: (final_dataset, rounds) with one CollapseResult per round,
        the last one being the round where nothing collapsed (unless the
        round cap was hit first)
    """
    config = _with_overrides(config, overrides)
    rounds = []
    round_number = 0
    while config.max_rounds is None or round_number < config.max_rounds:
        round_number += 1
        if config.verbose >= 1:
            console.print(f"\n[bold]ROUND {round_number}[/bold]")
        round_config = _with_overrides(config, {
            'iteration': str(round_number),
            'recode_table': round_table_path(config.recode_table, round_number),
        })
        result = collapse_groups(distance_fn(dataset), dataset, round_config)
        rounds.append(result)
        dataset = result.dataset
        if not result.amalgamated:
            break
    return dataset, rounds


def run_collapse(config: CollapseConfig) -> CollapseResult:
    """Read the matrix and dataset named in config, collapse, and save the output."""
    validate_config(config, require_files=True)
    if config.verbose >= 2:
        print_config_summary(config)

    matrix = read_distance_matrix(config.distance_matrix)
    dataset = read_dataset(config.dataset, group_col=config.group_col, verbose=config.verbose)
    if config.verbose >= 1:
        console.print(f"Loaded {len(dataset)} entities in {len(dataset.groups())} groups")

    result = collapse_groups(matrix, dataset, config)

    if config.output:
        result.dataset.to_csv(config.output)
        if config.verbose >= 1:
            console.print(f"  [green]✓[/green] Recoded dataset written to {escape(config.output)}")
    return result


def _with_overrides(config, overrides):
    config = config if config is not None else CollapseConfig()
    if not overrides:
        return config
    unknown = set(overrides) - set(CollapseConfig.__dataclass_fields__)
    if unknown:
        raise TypeError(f"Unknown collapse option(s): {sorted(unknown)}")
    return CollapseConfig(**{**config.__dict__, **overrides})


__all__ = [
    'CollapseConfig',
    'CollapseResult',
    'compute_clusters',
    'collapse_groups',
    'collapse_until_stable',
    'round_table_path',
    'run_collapse',
]
