"""
Minimum spanning tree helpers used to measure how much of a graph's
spatial extent a mapping covers.
"""

from __future__ import annotations
from typing import Sequence, Tuple

import numpy as np
from scipy.sparse.csgraph import minimum_spanning_tree as _scipy_mst

# Stand-in weight for present edges of length 0; scipy treats 0 as "no edge".
_ZERO_EDGE = 1e-300


def minimum_spanning_tree(matrix) -> Tuple[np.ndarray, float]:
    """
    Minimum spanning tree (forest, if disconnected) of a dense weighted graph.

    Args:
        matrix: Symmetric N x N weights. NaN entries and the diagonal are
            treated as absent edges.

    Returns:
        Symmetric N x N matrix with non-tree entries set to 0, and the sum
        of the tree edge weights
    """
    weights = np.array(matrix, dtype=float)
    if weights.ndim != 2 or weights.shape[0] != weights.shape[1]:
        raise ValueError(f"Adjacency matrix must be square, got shape {weights.shape}")

    present = ~np.isnan(weights)
    np.fill_diagonal(present, False)

    dense = np.where(present, weights, 0.0)
    dense[present & (dense == 0.0)] = _ZERO_EDGE

    tree = _scipy_mst(dense).toarray()
    tree = np.maximum(tree, tree.T)
    tree[tree == _ZERO_EDGE] = 0.0

    weight = float(np.triu(tree, k=1).sum())
    return tree, weight


def center_of_gravity_bin(hist) -> int:
    """
    Index of the bin holding the median of the histogram counts, searched
    from the largest distance downwards. -1 for an empty histogram.
    """
    arr = np.asarray(hist, dtype=np.int64)
    total = arr.sum()
    if total == 0:
        return -1
    center = total / 2.0
    cumulative = np.cumsum(arr[::-1])
    return int(len(arr) - 1 - np.argmax(cumulative >= center))


def relative_distance_matrix(graph) -> np.ndarray:
    """
    Symmetric matrix of center of gravity distance bins, divided by the
    largest of them. All zeros when the largest bin is 0. Empty histograms
    count as bin 0.
    """
    n = graph.num_nodes
    dist = np.zeros((n, n))
    for i in range(n):
        for j in range(i + 1, n):
            cog = max(center_of_gravity_bin(graph.dist_hist(i, j)), 0)
            dist[i, j] = dist[j, i] = cog

    max_bin = dist.max() if n > 1 else 0.0
    if max_bin <= 0:
        return np.zeros((n, n))
    return dist / max_bin


def subset_matrix(matrix: np.ndarray, indices: Sequence[int]) -> np.ndarray:
    """Copy of ``matrix`` with every entry outside the ``indices`` block set to NaN."""
    sub = np.full(matrix.shape, np.nan)
    idx = np.asarray(sorted(set(indices)), dtype=int)
    if idx.size:
        block = np.ix_(idx, idx)
        sub[block] = matrix[block]
    return sub


def coverage_ratio(weight_subset: float, weight_full: float) -> float:
    """
    ``min(a², b²) / max(a², b²)`` of two tree weights. 1.0 if both trees
    have weight 0, 0.0 if only one of them has.
    """
    a = weight_subset * weight_subset
    b = weight_full * weight_full
    hi = max(a, b)
    if hi == 0:
        return 1.0
    return min(a, b) / hi
