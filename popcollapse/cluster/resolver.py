"""Resolve threshold neighbourhoods into disjoint clusters of groups.

Two groups share a cluster when a chain of groups links them with every
consecutive pair at or below the threshold (single-linkage connected
components). The relation is closed with a disjoint-set forest, so the result
does not depend on the order in which neighbourhoods are visited.
"""

from collections import defaultdict
from typing import List, Sequence, Set

from rich.console import Console

from popcollapse.errors import InternalInvariantViolation

console = Console()


class DisjointSet:
    """Disjoint-set forest over ``0..n-1`` with path compression.

    The root of every set is its smallest member.
    """

    def __init__(self, n):
        self.parent = list(range(n))

    def find(self, x):
        parent = self.parent
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    def union(self, a, b):
        """Merge the sets holding a and b; return True if they were separate."""
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        if rb < ra:
            ra, rb = rb, ra
        self.parent[rb] = ra
        return True

    def roots(self):
        return [self.find(i) for i in range(len(self.parent))]


def _check_partition(clusters, n):
    seen = [m for cluster in clusters for m in cluster]
    if len(seen) != n or set(seen) != set(range(n)):
        raise InternalInvariantViolation(
            f"Clusters do not partition the {n} groups ({len(seen)} memberships, {len(set(seen))} distinct)"
        )


def resolve_cluster_indices(neighbourhoods: Sequence[Set[int]], verbose=0) -> List[List[int]]:
    """Connected components of the threshold graph, as lists of row indices.

    Parameters:
        neighbourhoods: One neighbour set per group (see threshold_neighbourhoods)
        verbose: 2 prints the number of passes and merges

    Returns:
        list of list of int: Each cluster sorted by index; clusters ordered by
        their first member.

    Raises:
        InternalInvariantViolation: More passes than groups were needed, or
        the clusters do not partition the groups.
    """
    n = len(neighbourhoods)
    if n == 0:
        return []

    forest = DisjointSet(n)
    max_passes = n
    passes = 0
    total_merges = 0
    while True:
        passes += 1
        if passes > max_passes:
            raise InternalInvariantViolation(
                f"Cluster resolution did not converge within {max_passes} passes"
            )
        merges = 0
        for i, neighbours in enumerate(neighbourhoods):
            for j in neighbours:
                if forest.union(i, j):
                    merges += 1
        total_merges += merges
        # Stable once a whole pass merges nothing
        if merges == 0:
            break

    if verbose >= 2:
        console.print(f"  Resolved {n} groups in {passes} pass(es), {total_merges} merge(s)")

    members = defaultdict(list)
    for i, root in enumerate(forest.roots()):
        members[root].append(i)
    clusters = [members[root] for root in sorted(members)]
    _check_partition(clusters, n)
    return clusters


def resolve_clusters(neighbourhoods, names, verbose=0):
    """Same as resolve_cluster_indices but returns clusters of group names.

    Members keep the order of ``names``, which is the canonical group order.
    """
    if len(names) != len(neighbourhoods):
        raise ValueError(f"{len(names)} names given for {len(neighbourhoods)} neighbourhoods")
    return [[names[i] for i in cluster] for cluster in resolve_cluster_indices(neighbourhoods, verbose=verbose)]


__all__ = ['DisjointSet', 'resolve_cluster_indices', 'resolve_clusters']
