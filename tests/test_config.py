import pytest

from flexophore.config import MatchingConfig, ScalingConfig
from flexophore.exceptions import ConfigurationError


def test_defaults():
    config = MatchingConfig()
    assert config.thresh_node_similarity == 0.3
    assert config.num_conformations == 100
    assert config.bins_histogram == 40
    assert len(config.scaling.final) == 4


@pytest.mark.parametrize("kwargs", [
    {"thresh_node_similarity": 1.5},
    {"blur_fraction": -0.1},
    {"num_conformations": 0},
    {"bins_histogram": 1},
    {"max_num_nodes": 65},
])
def test_invalid_values(kwargs):
    with pytest.raises(ConfigurationError):
        MatchingConfig(**kwargs)


def test_invalid_scaling():
    with pytest.raises(ConfigurationError):
        ScalingConfig(final=[(0.5, 0.1, 0.0, 1.0)])
    with pytest.raises(ConfigurationError):
        ScalingConfig(nodes=[])


def test_from_dict():
    config = MatchingConfig.from_dict({"query_bias": True,
                                       "scaling": {"nodes": [[0, 1, 0, 1]]}})
    assert config.query_bias
    assert config.scaling.nodes == [(0.0, 1.0, 0.0, 1.0)]


def test_unknown_key():
    with pytest.raises(ConfigurationError):
        MatchingConfig.from_dict({"threshold": 0.5})


def test_yaml_round_trip(tmp_path):
    path = tmp_path / "matching.yaml"
    config = MatchingConfig(thresh_histogram_similarity=0.6, query_bias=True)
    config.save_yaml(path)
    assert MatchingConfig.from_yaml(path) == config


def test_yaml_partial(tmp_path):
    path = tmp_path / "matching.yaml"
    path.write_text("thresh_node_similarity: 0.5\n")
    config = MatchingConfig.from_yaml(path)
    assert config.thresh_node_similarity == 0.5
    assert config.thresh_histogram_similarity == 0.75


def test_yaml_missing(tmp_path):
    with pytest.raises(ConfigurationError):
        MatchingConfig.from_yaml(tmp_path / "missing.yaml")


def test_yaml_not_a_mapping(tmp_path):
    path = tmp_path / "matching.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigurationError):
        MatchingConfig.from_yaml(path)
