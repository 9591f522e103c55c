"""Threshold clustering of populations.

Submodules:
- threshold_graph: Per-group threshold neighbourhoods
- resolver: Transitive closure into disjoint clusters
- naming: Cluster names and the reassignment table
"""

__all__ = ['threshold_graph', 'resolver', 'naming']
