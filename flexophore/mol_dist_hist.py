"""
MolDistHist, the Flexophore complete graph: pharmacophore nodes plus one
distance histogram for every unordered node pair.
"""

from __future__ import annotations
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, runtime_checkable
import re

import numpy as np

from .config import BINS_HISTOGRAM, MAX_NUM_NODES_FLEXOPHORE
from .exceptions import InvalidGraphError
from .pp_node import PPNode

# Minimum number of nodes for a meaningful comparison.
MINIMUM_NUM_NODES = 3

_HIST_PATTERN = re.compile(r"\[([^\[\]]*)\]")


def num_histograms(num_nodes: int) -> int:
    return (num_nodes * num_nodes - num_nodes) // 2


def hist_index(i: int, j: int, num_nodes: int) -> int:
    """
    Canonical index of the histogram for the node pair (i, j).

    The pairs are enumerated row by row over the upper triangle:
    (0,1), (0,2), ..., (0,n-1), (1,2), ...
    """
    if i == j:
        raise InvalidGraphError(f"No histogram for identical nodes {i}, {j}.")
    if i > j:
        i, j = j, i
    if i < 0 or j >= num_nodes:
        raise InvalidGraphError(
            f"Node pair ({i}, {j}) out of range for {num_nodes} nodes.")
    return i * num_nodes - (i * (i + 1)) // 2 + (j - i - 1)


@runtime_checkable
class SupportsVisualizationAnnotation(Protocol):
    """Graphs that can carry per-node mapping information for display."""

    def reset_annotation(self) -> None: ...

    def set_mapping_index(self, index_node: int, mapping_index: int) -> None: ...

    def set_similarity_mapping_nodes(self, index_node: int, similarity: float) -> None: ...


class MolDistHist:
    """
    Complete graph over pharmacophore nodes with distance histograms.

    Histograms are held in one read-only ``uint8`` array of shape
    ``(n*(n-1)/2, bins)`` ordered by :func:`hist_index`.
    """

    def __init__(self, nodes: Sequence[PPNode], histograms=None,
                 bins: int = BINS_HISTOGRAM):
        nodes = tuple(nodes)
        n = len(nodes)
        if n == 0:
            raise InvalidGraphError("No pharmacophore points in Flexophore.")
        if n > MAX_NUM_NODES_FLEXOPHORE:
            raise InvalidGraphError(
                f"{n} pharmacophore points exceed the maximum of {MAX_NUM_NODES_FLEXOPHORE}.")

        if histograms is None:
            arr = np.zeros((num_histograms(n), bins), dtype=np.uint8)
        else:
            arr = np.asarray(histograms)
            if arr.ndim != 2 or arr.shape[0] != num_histograms(n):
                raise InvalidGraphError(
                    f"Expected {num_histograms(n)} histograms for {n} nodes, "
                    f"got array of shape {arr.shape}.")
            if arr.size and (arr.min() < 0 or arr.max() > 255):
                raise InvalidGraphError("Histogram counts must be in [0, 255].")
            arr = arr.astype(np.uint8)

        arr.setflags(write=False)
        self._nodes = nodes
        self._histograms = arr

    # ───────────────────────── construction ──────────────────────────
    @classmethod
    def from_pair_histograms(cls, nodes: Sequence[PPNode],
                             pair_histograms: Mapping[Tuple[int, int], Sequence[int]],
                             bins: int = BINS_HISTOGRAM):
        """Build a graph from a ``{(i, j): histogram}`` mapping covering every pair."""
        n = len(nodes)
        arr = np.zeros((num_histograms(n), bins), dtype=np.int64)
        seen = set()
        for (i, j), hist in pair_histograms.items():
            idx = hist_index(i, j, n)
            hist = np.asarray(hist)
            if hist.shape != (bins,):
                raise InvalidGraphError(
                    f"Histogram for pair ({i}, {j}) has {hist.shape} bins, expected {bins}.")
            arr[idx] = hist
            seen.add(idx)
        if len(seen) != num_histograms(n):
            raise InvalidGraphError("Histograms missing for some node pairs.")
        return cls(nodes, arr, bins=bins)

    # ─────────────────────────── accessors ───────────────────────────
    @property
    def num_nodes(self) -> int:
        return len(self._nodes)

    @property
    def nodes(self) -> Tuple[PPNode, ...]:
        return self._nodes

    @property
    def num_bins(self) -> int:
        return self._histograms.shape[1]

    @property
    def histograms(self) -> np.ndarray:
        return self._histograms

    def node(self, index: int) -> PPNode:
        if not 0 <= index < len(self._nodes):
            raise InvalidGraphError(f"Node index {index} out of range.")
        return self._nodes[index]

    @property
    def num_mandatory_nodes(self) -> int:
        return sum(1 for n in self._nodes if n.mandatory)

    def is_mandatory(self, index: int) -> bool:
        return self.node(index).mandatory

    def hist_index(self, i: int, j: int) -> int:
        return hist_index(i, j, self.num_nodes)

    def dist_hist(self, i: int, j: int) -> np.ndarray:
        """Copy of the histogram for the node pair (i, j)."""
        return self._histograms[self.hist_index(i, j)].copy()

    def copy(self) -> 'MolDistHist':
        return MolDistHist(self._nodes, self._histograms.copy(), bins=self.num_bins)

    # ────────────────────────── text format ──────────────────────────
    def to_string(self) -> str:
        parts = ["[" + " ".join(str(n) for n in self._nodes) + "]"]
        for hist in self._histograms:
            parts.append("[" + " ".join(str(int(v)) for v in hist) + "]")
        return "".join(parts)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(nodes={self.num_nodes}, bins={self.num_bins})"

    @classmethod
    def read(cls, text: str, bins: Optional[int] = None) -> 'MolDistHist':
        """
        Read a graph written by :meth:`to_string`.

        Args:
            text: String form ``[(n1) (n2) ...][h h ...][h h ...]...``
            bins: Expected number of bins, inferred from the first histogram if None

        Returns:
            The parsed graph
        """
        blocks = _HIST_PATTERN.findall(text.strip())
        if not blocks:
            raise InvalidGraphError("No node block in Flexophore string.")

        nodes = [PPNode.read(tok) for tok in re.findall(r"\([^()]*\)h?\*?", blocks[0])]
        if not nodes:
            raise InvalidGraphError("No pharmacophore points in Flexophore string.")

        hist_blocks = blocks[1:]
        n_expected = num_histograms(len(nodes))
        if len(hist_blocks) != n_expected:
            raise InvalidGraphError(
                f"Expected {n_expected} histograms for {len(nodes)} nodes, "
                f"found {len(hist_blocks)}.")

        hists: List[List[int]] = []
        for block in hist_blocks:
            try:
                hists.append([int(v) for v in block.split()])
            except ValueError as e:
                raise InvalidGraphError(f"Error in histogram [{block}].") from e

        if bins is None:
            bins = len(hists[0]) if hists else BINS_HISTOGRAM
        for h in hists:
            if len(h) != bins:
                raise InvalidGraphError(
                    f"Error in histogram: {len(h)} bins, expected {bins}.")

        arr = np.array(hists, dtype=np.int64).reshape(n_expected, bins)
        return cls(nodes, arr, bins=bins)

    def __eq__(self, other) -> bool:
        if not isinstance(other, MolDistHist):
            return NotImplemented
        return (self._nodes == other._nodes
                and self._histograms.shape == other._histograms.shape
                and bool(np.array_equal(self._histograms, other._histograms)))

    def __hash__(self):
        return hash((self._nodes, self._histograms.tobytes()))


class MolDistHistViz(MolDistHist):
    """
    MolDistHist with per-node annotation used to colour matched
    pharmacophore points in a viewer.
    """

    INFO_DEFAULT = -1

    def __init__(self, nodes: Sequence[PPNode], histograms=None,
                 bins: int = BINS_HISTOGRAM):
        super().__init__(nodes, histograms, bins=bins)
        self._mapping_index: List[int] = []
        self._similarity_mapping: List[float] = []
        self.reset_annotation()

    @classmethod
    def from_mol_dist_hist(cls, mdh: MolDistHist) -> 'MolDistHistViz':
        return cls(mdh.nodes, mdh.histograms.copy(), bins=mdh.num_bins)

    def get_mol_dist_hist(self) -> MolDistHist:
        return MolDistHist(self.nodes, self.histograms.copy(), bins=self.num_bins)

    def reset_annotation(self) -> None:
        self._mapping_index = [self.INFO_DEFAULT] * self.num_nodes
        self._similarity_mapping = [float(self.INFO_DEFAULT)] * self.num_nodes

    def set_mapping_index(self, index_node: int, mapping_index: int) -> None:
        self.node(index_node)
        self._mapping_index[index_node] = mapping_index

    def set_similarity_mapping_nodes(self, index_node: int, similarity: float) -> None:
        self.node(index_node)
        self._similarity_mapping[index_node] = float(similarity)

    def annotation(self, index_node: int) -> Tuple[int, float]:
        """(mapping index, node similarity) for one node, -1 where unset."""
        return self._mapping_index[index_node], self._similarity_mapping[index_node]

    def annotations(self) -> Dict[int, Tuple[int, float]]:
        return {i: self.annotation(i) for i in range(self.num_nodes)
                if self._mapping_index[i] != self.INFO_DEFAULT}
