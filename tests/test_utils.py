import matplotlib
matplotlib.use("Agg")

import pytest

from flexophore.solution import Solution
from flexophore.utils import histogram_frame, plot_histograms, similarity_frame


@pytest.fixture
def assigned(objective, graph_factory):
    query = graph_factory([(0,), (1,), (5,)])
    base = graph_factory([(0,), (1,), (5,)], peaks={(0, 2): 30})
    objective.set_query(query)
    objective.set_base(base)
    return objective


def test_similarity_frame(assigned):
    df = similarity_frame(assigned, Solution([(0, 0), (1, 1), (2, 2)]))
    assert list(df['query']) == [0, 1, 2]
    assert df['similarity'].tolist() == pytest.approx([1.0, 1.0, 1.0])
    assert df['query_node'][0] == "(0)h"


def test_histogram_frame(assigned):
    df = histogram_frame(assigned, Solution([(0, 0), (1, 1), (2, 2)]))
    assert len(df) == 3
    assert df['valid'].tolist() == [True, False, True]


def test_plot_histograms(assigned, tmp_path):
    path = tmp_path / "hist.png"
    fig = plot_histograms(assigned.query, assigned.base, (0, 2), (0, 2), filename=path)
    assert len(fig.axes) == 2
    assert path.exists()
