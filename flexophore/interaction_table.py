"""
Distance table between pharmacophore interaction types.

The table is immutable after construction and safe to share between
threads and objectives. ``default_table()`` builds the shared default
exactly once.
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union
import logging
import threading

import numpy as np

logger = logging.getLogger(__name__)

# Feature families of RDKit's BaseFeatures.fdef, in interaction id order.
FEATURE_FAMILIES = (
    "Donor",
    "Acceptor",
    "NegIonizable",
    "PosIonizable",
    "ZnBinder",
    "Aromatic",
    "Hydrophobe",
    "LumpedHydrophobe",
)

# Upper triangle of the default family distances, row by row.
_DEFAULT_FAMILY_DISTANCES = {
    ("Donor", "Acceptor"): 0.6,
    ("Donor", "NegIonizable"): 0.8,
    ("Donor", "PosIonizable"): 0.4,
    ("Donor", "ZnBinder"): 0.7,
    ("Donor", "Aromatic"): 0.9,
    ("Donor", "Hydrophobe"): 1.0,
    ("Donor", "LumpedHydrophobe"): 1.0,
    ("Acceptor", "NegIonizable"): 0.3,
    ("Acceptor", "PosIonizable"): 0.9,
    ("Acceptor", "ZnBinder"): 0.5,
    ("Acceptor", "Aromatic"): 0.85,
    ("Acceptor", "Hydrophobe"): 0.95,
    ("Acceptor", "LumpedHydrophobe"): 0.95,
    ("NegIonizable", "PosIonizable"): 1.0,
    ("NegIonizable", "ZnBinder"): 0.4,
    ("NegIonizable", "Aromatic"): 1.0,
    ("NegIonizable", "Hydrophobe"): 1.0,
    ("NegIonizable", "LumpedHydrophobe"): 1.0,
    ("PosIonizable", "ZnBinder"): 0.9,
    ("PosIonizable", "Aromatic"): 0.8,
    ("PosIonizable", "Hydrophobe"): 0.9,
    ("PosIonizable", "LumpedHydrophobe"): 0.9,
    ("ZnBinder", "Aromatic"): 1.0,
    ("ZnBinder", "Hydrophobe"): 1.0,
    ("ZnBinder", "LumpedHydrophobe"): 1.0,
    ("Aromatic", "Hydrophobe"): 0.4,
    ("Aromatic", "LumpedHydrophobe"): 0.3,
    ("Hydrophobe", "LumpedHydrophobe"): 0.1,
}

# Optimal distance used for interaction functions without a minimum.
_UNDEFINED_OPTIMAL_DIST = 4.5
# Distance for ligand class pairs without any observation.
_NO_OBSERVATION_DIST = 5.0


class InteractionDistanceTable:
    """
    Symmetric distance between interaction type ids, 0 for identical types
    and at most 1.
    """

    def __init__(self, distances, labels: Optional[Sequence[str]] = None):
        arr = np.array(distances, dtype=float)
        if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
            raise ValueError(f"Distance table must be square, got shape {arr.shape}")
        if not np.all(np.isfinite(arr)):
            raise ValueError("Distance table contains non-finite values")
        if not np.allclose(arr, arr.T):
            raise ValueError("Distance table must be symmetric")
        if labels is not None and len(labels) != arr.shape[0]:
            raise ValueError("Number of labels does not match the table size")

        arr = np.clip(arr, 0.0, 1.0)
        np.fill_diagonal(arr, 0.0)
        arr.setflags(write=False)

        self._distances = arr
        self._labels = tuple(labels) if labels is not None else None

    # ───────────────────────── constructors ──────────────────────────
    @classmethod
    def from_matrix(cls, distances, labels: Optional[Sequence[str]] = None):
        return cls(distances, labels)

    @classmethod
    def from_descriptors(cls, optimal_dist, strength, occurrences,
                         labels: Optional[Sequence[str]] = None):
        """
        Derive ligand type distances from protein-ligand interaction statistics.

        Each argument is an array of shape (protein classes, ligand classes)
        holding, per class pair, the distance of the energy minimum of the
        interaction function (<= 0 if it has none), its depth and the number
        of observations. Two ligand classes are close when they interact in
        the same way with every protein class.

        Args:
            optimal_dist: Position of the interaction minimum in Angstrom
            strength: Energy at the minimum
            occurrences: Number of observed contacts
            labels: Optional names of the ligand classes

        Returns:
            Table normalized into [0, 1]
        """
        opt = np.asarray(optimal_dist, dtype=float)
        st = np.asarray(strength, dtype=float)
        occ = np.asarray(occurrences, dtype=float)
        if not (opt.shape == st.shape == occ.shape) or opt.ndim != 2:
            raise ValueError("Descriptor arrays must share one 2D shape")

        defined = opt > 0
        m = np.where(defined, opt, _UNDEFINED_OPTIMAL_DIST)
        s = np.where(defined, st, 0.0)

        n_ligand = opt.shape[1]
        raw = np.zeros((n_ligand, n_ligand))
        for l1 in range(n_ligand):
            for l2 in range(l1, n_ligand):
                d = (m[:, l1] - m[:, l2]) ** 2 + (s[:, l1] - s[:, l2]) ** 2 / 9.0
                coeff = occ[:, l1] + occ[:, l2]
                total = coeff.sum()
                value = (d * coeff).sum() / total if total > 0 else _NO_OBSERVATION_DIST
                raw[l1, l2] = raw[l2, l1] = value

        max_value = raw.max()
        if max_value > 0:
            raw = raw / max_value
        return cls(raw, labels)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'InteractionDistanceTable':
        with np.load(path, allow_pickle=False) as data:
            labels = [str(v) for v in data["labels"]] if "labels" in data else None
            return cls(data["distances"], labels)

    def save(self, path: Union[str, Path]):
        arrays = {"distances": self._distances}
        if self._labels is not None:
            arrays["labels"] = np.array(self._labels)
        np.savez(path, **arrays)

    # ─────────────────────────── accessors ───────────────────────────
    @property
    def num_types(self) -> int:
        return self._distances.shape[0]

    @property
    def labels(self):
        return self._labels

    @property
    def matrix(self) -> np.ndarray:
        return self._distances

    def distance(self, type_a: int, type_b: int) -> float:
        if not (0 <= type_a < self.num_types and 0 <= type_b < self.num_types):
            raise IndexError(
                f"Interaction type ({type_a}, {type_b}) not in table of size {self.num_types}")
        return float(self._distances[type_a, type_b])

    def type_id(self, label: str) -> int:
        if self._labels is None:
            raise KeyError("Table has no labels")
        return self._labels.index(label)


def _build_default_table() -> InteractionDistanceTable:
    index: Dict[str, int] = {name: i for i, name in enumerate(FEATURE_FAMILIES)}
    n = len(FEATURE_FAMILIES)
    arr = np.zeros((n, n))
    for (a, b), value in _DEFAULT_FAMILY_DISTANCES.items():
        arr[index[a], index[b]] = arr[index[b], index[a]] = value
    return InteractionDistanceTable(arr, FEATURE_FAMILIES)


_default_table: Optional[InteractionDistanceTable] = None
_default_table_lock = threading.Lock()


def default_table() -> InteractionDistanceTable:
    """Shared table over the RDKit feature families, created on first use."""
    global _default_table
    if _default_table is None:
        with _default_table_lock:
            if _default_table is None:
                logger.debug("Building default interaction distance table")
                _default_table = _build_default_table()
    return _default_table


def family_ids(families: Sequence[str]) -> List[int]:
    """Interaction ids of RDKit feature family names."""
    return [FEATURE_FAMILIES.index(f) for f in families]
