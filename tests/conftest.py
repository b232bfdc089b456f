"""
Test fixtures for Flexophore matching tests.

Graphs are built with one histogram peak of 100 counts per node pair, so
identical pairs overlap completely and pairs a few bins apart not at all.

Interaction ids follow the default table: 0 Donor, 1 Acceptor,
2 NegIonizable, 5 Aromatic, 6 Hydrophobe.
"""
import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from flexophore.config import BINS_HISTOGRAM
from flexophore.mol_dist_hist import MolDistHist, MolDistHistViz
from flexophore.pp_node import nodes_from_types
from flexophore.completegraphmatcher.objective import ObjectiveFlexophoreHardMatchUncovered


def peak_histogram(bin_index, count=100, bins=BINS_HISTOGRAM):
    hist = np.zeros(bins, dtype=np.uint8)
    hist[bin_index] = count
    return hist


@pytest.fixture
def graph_factory():
    """
    Factory for complete graphs.

    ``peaks`` maps a node pair to the bin of its histogram peak; pairs not
    listed peak at ``10 + i + j``.
    """
    def _make(types, peaks=None, mandatory=(), hetero=True, viz=False):
        nodes = list(nodes_from_types(types, hetero=hetero))
        nodes = [n.with_mandatory(i in mandatory) for i, n in enumerate(nodes)]
        peaks = peaks or {}
        pair_histograms = {}
        for i in range(len(nodes)):
            for j in range(i + 1, len(nodes)):
                pair_histograms[(i, j)] = peak_histogram(peaks.get((i, j), 10 + i + j))
        cls = MolDistHistViz if viz else MolDistHist
        return cls.from_pair_histograms(nodes, pair_histograms)
    return _make


@pytest.fixture
def three_node_graph(graph_factory):
    return graph_factory([(0,), (1,), (5,)])


@pytest.fixture
def objective():
    return ObjectiveFlexophoreHardMatchUncovered()
