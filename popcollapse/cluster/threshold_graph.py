"""Threshold neighbourhoods over a symmetric group distance matrix."""

import numpy as np


def threshold_adjacency(distances, threshold):
    """Boolean adjacency: True where distance <= threshold.

    The diagonal is always True, even when the stored diagonal is NaN.
    NaN distances (absent pairs) are never linked.
    """
    values = np.asarray(distances, dtype=float)
    with np.errstate(invalid='ignore'):
        adj = values <= threshold
    np.fill_diagonal(adj, True)
    return adj


def threshold_neighbourhoods(distances, threshold):
    """Neighbour sets, one per group, as sets of row indices.

    Parameters:
        distances: Square symmetric matrix (numpy array or DataFrame)
        threshold: Maximum distance for two groups to be linked

    Returns:
        list of set: ``result[i]`` holds every j with distance(i, j) <= threshold,
        including i itself.
    """
    adj = threshold_adjacency(distances, threshold)
    return [set(np.flatnonzero(row).tolist()) for row in adj]


__all__ = ['threshold_adjacency', 'threshold_neighbourhoods']
