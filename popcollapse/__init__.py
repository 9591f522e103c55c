"""popcollapse: amalgamate populations by pairwise distance threshold.

Submodules:
- core: distance matrix loading, collaborator datasets, reassignment tables
- cluster: threshold graph, cluster resolution and naming
- collapse: the collapse pipeline
"""

from popcollapse.collapse import (
    CollapseConfig,
    CollapseResult,
    collapse_groups,
    collapse_until_stable,
    compute_clusters,
)

__all__ = [
    'CollapseConfig',
    'CollapseResult',
    'collapse_groups',
    'collapse_until_stable',
    'compute_clusters',
]
