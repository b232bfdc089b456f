"""
Configuration management for Flexophore matching
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import yaml

from .exceptions import ConfigurationError

# (x_lo, x_hi, y_lo, y_hi)
ScaleClass = Tuple[float, float, float, float]

MAX_NUM_NODES_FLEXOPHORE = 64
NUM_CONFORMATIONS = 100
BINS_HISTOGRAM = 40
# Angstrom
RANGE_HISTOGRAM = 20.0


def _default_histogram_scale() -> List[ScaleClass]:
    # A minimum similarity is already enforced by the histogram threshold.
    return [(0.05, 1.0, 0.2, 1.0)]


def _default_node_scale() -> List[ScaleClass]:
    return [(0.0, 1.0, 0.0, 1.0)]


def _default_final_scale() -> List[ScaleClass]:
    return [
        (0.0, 0.1, 0.0, 0.5),
        (0.1, 0.5, 0.5, 0.8),
        (0.5, 0.7, 0.8, 0.9),
        (0.7, 1.0, 0.9, 1.0),
    ]


@dataclass
class ScalingConfig:
    """Breakpoint tables for the similarity scaling curves"""
    nodes: List[ScaleClass] = field(default_factory=_default_node_scale)
    histograms: List[ScaleClass] = field(default_factory=_default_histogram_scale)
    final: List[ScaleClass] = field(default_factory=_default_final_scale)

    def __post_init__(self):
        for name in ("nodes", "histograms", "final"):
            classes = [tuple(float(v) for v in c) for c in getattr(self, name)]
            if not classes:
                raise ConfigurationError(f"Scaling table '{name}' is empty")
            for c in classes:
                if len(c) != 4:
                    raise ConfigurationError(
                        f"Scaling class {c} in '{name}' needs 4 values")
                if c[1] <= c[0]:
                    raise ConfigurationError(
                        f"Scaling class {c} in '{name}' has an empty x range")
            setattr(self, name, classes)


@dataclass
class MatchingConfig:
    """Parameters of the Flexophore complete graph objective"""
    thresh_node_similarity: float = 0.3
    thresh_histogram_similarity: float = 0.75
    blur_fraction: float = 0.05
    num_conformations: int = NUM_CONFORMATIONS
    bins_histogram: int = BINS_HISTOGRAM
    range_histogram: float = RANGE_HISTOGRAM
    max_num_nodes: int = MAX_NUM_NODES_FLEXOPHORE
    query_bias: bool = False
    scaling: ScalingConfig = field(default_factory=ScalingConfig)

    def __post_init__(self):
        if isinstance(self.scaling, dict):
            self.scaling = ScalingConfig(**self.scaling)

        for name in ("thresh_node_similarity", "thresh_histogram_similarity",
                     "blur_fraction"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be in [0, 1], got {value}")

        if self.num_conformations <= 0:
            raise ConfigurationError("num_conformations must be positive")
        if self.bins_histogram < 2:
            raise ConfigurationError("bins_histogram must be at least 2")
        if self.range_histogram <= 0:
            raise ConfigurationError("range_histogram must be positive")
        if not 1 <= self.max_num_nodes <= MAX_NUM_NODES_FLEXOPHORE:
            raise ConfigurationError(
                f"max_num_nodes must be in [1, {MAX_NUM_NODES_FLEXOPHORE}]")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MatchingConfig':
        """Create a config from a plain dictionary, rejecting unknown keys"""
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'MatchingConfig':
        """Load a config from a YAML file"""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping")

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def save_yaml(self, path: Union[str, Path]):
        data = self.to_dict()
        # yaml has no tuple type for safe_load
        data['scaling'] = {k: [list(c) for c in v] for k, v in data['scaling'].items()}
        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
