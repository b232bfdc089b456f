"""
Similarity between distance histograms of two node pairs.
"""

from __future__ import annotations

import numpy as np

from ..config import NUM_CONFORMATIONS

FRACTION_BLUR = 0.05


def blur_histogram(hist, fraction: float = FRACTION_BLUR) -> np.ndarray:
    """
    Spread a fraction of every non-empty bin into its direct neighbours.

    The spill is ``floor(count * fraction + 0.5)`` and is added on top of
    the neighbour's own count; the original counts stay in place.

    Args:
        hist: Byte counts per distance bin
        fraction: Share of a bin added to each neighbour

    Returns:
        Integer array of the same length
    """
    arr = np.asarray(hist, dtype=np.int64)
    blurred = arr.copy()
    spill = np.where(arr > 0, np.floor(arr * fraction + 0.5), 0).astype(np.int64)
    blurred[:-1] += spill[1:]
    blurred[1:] += spill[:-1]
    return blurred


def histogram_overlap(blurred_a, blurred_b, num_conformations: int = NUM_CONFORMATIONS) -> float:
    """Summed bin-wise minimum over the number of conformations, at most 1."""
    overlap = np.minimum(blurred_a, blurred_b).sum()
    score = float(overlap) / num_conformations
    return min(score, 1.0)


class HistogramMatchCalculator:
    """
    Compares the histogram of a query node pair with the histogram of a
    base node pair. All buffers are local to a call.
    """

    def __init__(self, fraction: float = FRACTION_BLUR,
                 num_conformations: int = NUM_CONFORMATIONS):
        self.fraction = fraction
        self.num_conformations = num_conformations

    def similarity_histograms(self, hist_query, hist_base) -> float:
        hist_query = np.asarray(hist_query)
        hist_base = np.asarray(hist_base)
        if hist_query.shape != hist_base.shape:
            raise ValueError(
                f"Histogram lengths differ: {hist_query.shape} and {hist_base.shape}")
        return histogram_overlap(blur_histogram(hist_query, self.fraction),
                                 blur_histogram(hist_base, self.fraction),
                                 self.num_conformations)

    def get_similarity(self, query, index_query_1: int, index_query_2: int,
                       base, index_base_1: int, index_base_2: int) -> float:
        """
        Returns:
            Similarity between 0 and 1, 1 for identical histograms
        """
        return self.similarity_histograms(query.dist_hist(index_query_1, index_query_2),
                                          base.dist_hist(index_base_1, index_base_2))
