import numpy as np
import pytest

from flexophore.completegraphmatcher.histogram import (HistogramMatchCalculator,
                                                       blur_histogram, histogram_overlap)


def peak(bin_index, count=100, bins=40):
    h = np.zeros(bins, dtype=np.uint8)
    h[bin_index] = count
    return h


class TestBlur:
    def test_spill_into_neighbours(self):
        assert blur_histogram([0, 100, 0]).tolist() == [5, 100, 5]

    def test_rounding(self):
        assert blur_histogram([0, 10, 0]).tolist() == [1, 10, 1]
        assert blur_histogram([0, 9, 0]).tolist() == [0, 9, 0]

    def test_first_bin_blurred(self):
        assert blur_histogram([100, 0, 0]).tolist() == [100, 5, 0]

    def test_original_untouched(self):
        h = np.array([0, 100, 0], dtype=np.uint8)
        blur_histogram(h)
        assert h.tolist() == [0, 100, 0]


class TestSimilarity:
    def test_identical(self):
        calc = HistogramMatchCalculator()
        assert calc.similarity_histograms(peak(5), peak(5)) == 1.0

    def test_clamped_at_one(self):
        calc = HistogramMatchCalculator()
        assert calc.similarity_histograms(peak(5, 255), peak(5, 255)) == 1.0

    def test_neighbouring_bins(self):
        calc = HistogramMatchCalculator()
        assert calc.similarity_histograms(peak(5), peak(6)) == pytest.approx(0.1)

    def test_disjoint(self):
        calc = HistogramMatchCalculator()
        assert calc.similarity_histograms(peak(5), peak(15)) == 0.0

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            HistogramMatchCalculator().similarity_histograms(peak(1, bins=40), peak(1, bins=20))

    def test_overlap(self):
        assert histogram_overlap(np.array([20, 30]), np.array([40, 10])) == pytest.approx(0.3)

    def test_graph_lookup(self, graph_factory):
        query = graph_factory([(0,), (1,), (5,)])
        base = graph_factory([(0,), (1,), (5,)], peaks={(0, 1): 30})
        calc = HistogramMatchCalculator()
        assert calc.get_similarity(query, 1, 2, base, 2, 1) == 1.0
        assert calc.get_similarity(query, 0, 1, base, 0, 1) == 0.0
