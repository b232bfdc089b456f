"""
Objective function for matching two Flexophore complete graphs.

The coverage weighting is hard: nodes left out of a mapping shrink the
minimum spanning tree of the mapped subset and lower the final score
strongly.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Optional
import logging

import numpy as np

from ..config import MatchingConfig
from ..exceptions import CapabilityNotSupportedError, ConfigurationError
from ..interaction_table import InteractionDistanceTable, default_table
from ..mol_dist_hist import SupportsVisualizationAnnotation, num_histograms
from .histogram import HistogramMatchCalculator
from .mst import (coverage_ratio, minimum_spanning_tree,
                  relative_distance_matrix, subset_matrix)
from .node_similarity import PPNodeSimilarity
from .scaling import ScaleClasses

logger = logging.getLogger(__name__)


@dataclass
class SimilarityResult:
    """Intermediate values of the most recent ``get_similarity`` call."""
    avr_pairwise_mapping_scaled: float = 0.0
    coverage_query: float = 0.0
    coverage_base: float = 0.0
    ratio_nodes: float = 0.0
    similarity: float = 0.0
    similarity_scaled: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


class _GraphHelpers:
    """Relative distance matrix and MST weight of one graph."""

    def __init__(self, graph):
        self.relative_distances = relative_distance_matrix(graph)
        _, self.sum_distance_min_span_tree = minimum_spanning_tree(self.relative_distances)


class ObjectiveFlexophoreHardMatchUncovered:
    """
    Scores candidate mappings between a query and a base Flexophore.

    One instance holds the similarity caches of one (query, base) pair and
    is meant to be used by a single worker. Assigning a new query or base
    invalidates the caches; they are rebuilt lazily on the next access.
    """

    def __init__(self, config: Optional[MatchingConfig] = None,
                 table: Optional[InteractionDistanceTable] = None):
        self.config = config or MatchingConfig()

        self.node_similarity = PPNodeSimilarity(
            table if table is not None else default_table(),
            threshold=self.config.thresh_node_similarity)

        self.histogram_match_calculator = HistogramMatchCalculator(
            fraction=self.config.blur_fraction,
            num_conformations=self.config.num_conformations)

        self.scale_classes_similarity_nodes = ScaleClasses(self.config.scaling.nodes)
        self.scale_classes_similarity_histogram = ScaleClasses(self.config.scaling.histograms)
        self.scale_classes_final_similarity = ScaleClasses(self.config.scaling.final)

        self.thresh_node_min_similarity = self.config.thresh_node_similarity
        self.thresh_histogram_similarity = self.config.thresh_histogram_similarity
        self._query_bias = self.config.query_bias

        max_nodes = self.config.max_num_nodes
        max_histograms = num_histograms(max_nodes)
        self._arr_similarity_nodes = np.zeros((max_nodes, max_nodes), dtype=np.float32)
        self._valid_similarity_nodes = np.zeros((max_nodes, max_nodes), dtype=bool)
        self._arr_similarity_histograms = np.zeros((max_histograms, max_histograms), dtype=np.float32)
        self._valid_similarity_histograms = np.zeros((max_histograms, max_histograms), dtype=bool)

        self._cg_query = None
        self._cg_base = None
        self._helpers_query: Optional[_GraphHelpers] = None
        self._helpers_base: Optional[_GraphHelpers] = None
        self._reset_similarity_arrays = False

        self.recent_results = SimilarityResult()

        logger.info(f"Flexophore objective initialized (max nodes {max_nodes}, "
                    f"node threshold {self.thresh_node_min_similarity}, "
                    f"histogram threshold {self.thresh_histogram_similarity})")

    # ───────────────────────── graph assignment ──────────────────────────
    def _check_graph(self, graph, role: str):
        if graph.num_nodes > self.config.max_num_nodes:
            raise ConfigurationError(
                f"{role} has {graph.num_nodes} nodes, objective supports "
                f"at most {self.config.max_num_nodes}")
        if graph.num_bins != self.config.bins_histogram:
            raise ConfigurationError(
                f"{role} histograms have {graph.num_bins} bins, "
                f"objective expects {self.config.bins_histogram}")

    def set_query(self, cg_query):
        self._check_graph(cg_query, "Query")
        self._cg_query = cg_query
        self._helpers_query = None
        self._reset_similarity_arrays = True

    def set_base(self, cg_base):
        self._check_graph(cg_base, "Base")
        self._cg_base = cg_base
        self._helpers_base = None
        self._reset_similarity_arrays = True

    @property
    def query(self):
        return self._cg_query

    @property
    def base(self):
        return self._cg_base

    def set_query_bias(self, query_bias: bool):
        self._query_bias = bool(query_bias)

    @property
    def query_bias(self) -> bool:
        return self._query_bias

    @property
    def nodes_query(self) -> int:
        return self._cg_query.num_nodes

    @property
    def nodes_base(self) -> int:
        return self._cg_base.num_nodes

    def _prepare(self):
        if self._cg_query is None or self._cg_base is None:
            raise ConfigurationError("Query and base must be set before scoring")

        if self._helpers_query is None:
            logger.debug("Calculating helpers for query")
            self._helpers_query = _GraphHelpers(self._cg_query)

        if self._helpers_base is None:
            logger.debug("Calculating helpers for base")
            self._helpers_base = _GraphHelpers(self._cg_base)

        if self._reset_similarity_arrays:
            self._reset_similarity_matrices()

    def _reset_similarity_matrices(self):
        nq, nb = self.nodes_query, self.nodes_base
        self._valid_similarity_nodes[:nq, :nb] = False
        self._valid_similarity_histograms[:num_histograms(nq), :num_histograms(nb)] = False
        self._reset_similarity_arrays = False
        logger.debug(f"Similarity caches reset for {nq} query and {nb} base nodes")

    # ───────────────────────────── validation ─────────────────────────────
    def is_valid_solution(self, solution) -> bool:
        """
        Hard filter for a mapping. Invalid if a mandatory query point is
        missing, if either side maps no hetero atom node, if a single node
        pair or a single histogram pair falls below its threshold.
        """
        self._prepare()

        heap = solution.size_heap
        cg_query, cg_base = self._cg_query, self._cg_base

        num_mandatory = cg_query.num_mandatory_nodes
        if num_mandatory > 0:
            mandatory_in_solution = sum(
                1 for k in range(heap)
                if cg_query.is_mandatory(solution.index_query_from_heap(k)))
            if mandatory_in_solution < min(heap, num_mandatory):
                return False

        hetero_query = False
        hetero_base = False
        for k in range(heap):
            index_query = solution.index_query_from_heap(k)
            index_base = solution.index_corresponding_base_node(index_query)
            if cg_query.node(index_query).has_hetero_atom():
                hetero_query = True
            if cg_base.node(index_base).has_hetero_atom():
                hetero_base = True
        if not hetero_query or not hetero_base:
            return False

        for k in range(heap):
            index_query = solution.index_query_from_heap(k)
            index_base = solution.index_corresponding_base_node(index_query)
            if not self._are_nodes_mapping(index_query, index_base):
                return False

        for i in range(heap):
            index_node_1_query = solution.index_query_from_heap(i)
            index_node_1_base = solution.index_corresponding_base_node(index_node_1_query)
            for j in range(i + 1, heap):
                index_node_2_query = solution.index_query_from_heap(j)
                index_node_2_base = solution.index_corresponding_base_node(index_node_2_query)
                if not self._are_histograms_mapping(index_node_1_query, index_node_2_query,
                                                    index_node_1_base, index_node_2_base):
                    return False

        return True

    def are_nodes_mapping(self, index_node_query: int, index_node_base: int) -> bool:
        self._prepare()
        return self._are_nodes_mapping(index_node_query, index_node_base)

    def _are_nodes_mapping(self, index_node_query, index_node_base) -> bool:
        return self.similarity_nodes(index_node_query, index_node_base) >= self.thresh_node_min_similarity

    def _are_histograms_mapping(self, index_node_1_query, index_node_2_query,
                                index_node_1_base, index_node_2_base) -> bool:
        sim = self.similarity_histogram(index_node_1_query, index_node_2_query,
                                        index_node_1_base, index_node_2_base)
        return sim >= self.thresh_histogram_similarity

    # ────────────────────────────── scoring ───────────────────────────────
    def get_similarity(self, solution) -> float:
        """
        Score of a mapping, approximately in [0, 1].

        The mean pairwise mapping score over all pairs of mapped nodes is
        multiplied by the MST coverage of query and base and by a penalty
        for differing graph sizes. In query bias mode only the query
        coverage counts and a base larger than the query is not penalized.
        A solution with fewer than two mapped pairs scores 0.
        """
        self._prepare()

        heap = solution.size_heap
        result = SimilarityResult()

        mappings = (heap * heap - heap) / 2.0
        if mappings == 0:
            self.recent_results = result
            return 0.0

        sum_pairwise_mapping = 0.0
        for i in range(heap):
            index_node_1_query = solution.index_query_from_heap(i)
            index_node_1_base = solution.index_corresponding_base_node(index_node_1_query)
            for j in range(i + 1, heap):
                index_node_2_query = solution.index_query_from_heap(j)
                index_node_2_base = solution.index_corresponding_base_node(index_node_2_query)
                sum_pairwise_mapping += self._score_pairwise_mapping(
                    index_node_1_query, index_node_2_query,
                    index_node_1_base, index_node_2_base)

        result.avr_pairwise_mapping_scaled = sum_pairwise_mapping / mappings

        result.coverage_query = self._ratio_minimum_spanning_tree(
            self._helpers_query, solution.query_indices())
        result.coverage_base = self._ratio_minimum_spanning_tree(
            self._helpers_base, solution.base_indices())

        nodes_query_sq = float(self.nodes_query * self.nodes_query)
        nodes_base_sq = float(self.nodes_base * self.nodes_base)

        if self._query_bias:
            coverage = result.coverage_query
            ratio_nodes = 1.0
            if self.nodes_query > self.nodes_base:
                ratio_nodes = nodes_base_sq / nodes_query_sq
        else:
            coverage = result.coverage_query * result.coverage_base
            ratio_nodes = min(nodes_query_sq, nodes_base_sq) / max(nodes_query_sq, nodes_base_sq)

        result.ratio_nodes = ratio_nodes
        result.similarity = result.avr_pairwise_mapping_scaled * coverage * ratio_nodes
        result.similarity_scaled = self.scale_classes_final_similarity.scale(result.similarity)

        self.recent_results = result
        return result.similarity

    def get_similarity_scaled(self, solution) -> float:
        """``get_similarity`` passed through the final scaling curve."""
        self.get_similarity(solution)
        return self.recent_results.similarity_scaled

    def _score_pairwise_mapping(self, index_node_1_query, index_node_2_query,
                                index_node_1_base, index_node_2_base) -> float:
        sim_node_pair_1 = self.scale_classes_similarity_nodes.scale(
            self.similarity_nodes(index_node_1_query, index_node_1_base))
        sim_node_pair_2 = self.scale_classes_similarity_nodes.scale(
            self.similarity_nodes(index_node_2_query, index_node_2_base))

        sim_hists = self.similarity_histogram(index_node_1_query, index_node_2_query,
                                              index_node_1_base, index_node_2_base)
        if sim_hists == 0:
            logger.warning(
                f"Histogram similarity 0 for query pair ({index_node_1_query}, {index_node_2_query}) "
                f"and base pair ({index_node_1_base}, {index_node_2_base})")
        sim_hists_scaled = self.scale_classes_similarity_histogram.scale(sim_hists)

        return (sim_node_pair_1 * sim_node_pair_1
                * sim_node_pair_2 * sim_node_pair_2
                * sim_hists_scaled * sim_hists_scaled)

    @staticmethod
    def _ratio_minimum_spanning_tree(helpers: _GraphHelpers, indices) -> float:
        sub = subset_matrix(helpers.relative_distances, indices)
        _, sum_subset = minimum_spanning_tree(sub)
        return coverage_ratio(sum_subset, helpers.sum_distance_min_span_tree)

    # ───────────────────────── cached similarities ─────────────────────────
    def similarity_nodes(self, index_node_query: int, index_node_base: int) -> float:
        self._prepare()
        node_query = self._cg_query.node(index_node_query)
        node_base = self._cg_base.node(index_node_base)
        if not self._valid_similarity_nodes[index_node_query, index_node_base]:
            sim = self.node_similarity.similarity(node_query, node_base)
            self._arr_similarity_nodes[index_node_query, index_node_base] = sim
            self._valid_similarity_nodes[index_node_query, index_node_base] = True
        return float(self._arr_similarity_nodes[index_node_query, index_node_base])

    def similarity_histogram(self, index_node_1_query: int, index_node_2_query: int,
                             index_node_1_base: int, index_node_2_base: int) -> float:
        self._prepare()
        index_histogram_query = self._cg_query.hist_index(index_node_1_query, index_node_2_query)
        index_histogram_base = self._cg_base.hist_index(index_node_1_base, index_node_2_base)

        if not self._valid_similarity_histograms[index_histogram_query, index_histogram_base]:
            sim = self.histogram_match_calculator.get_similarity(
                self._cg_query, index_node_1_query, index_node_2_query,
                self._cg_base, index_node_1_base, index_node_2_base)
            self._arr_similarity_histograms[index_histogram_query, index_histogram_base] = sim
            self._valid_similarity_histograms[index_histogram_query, index_histogram_base] = True
        return float(self._arr_similarity_histograms[index_histogram_query, index_histogram_base])

    def similarity_pp_nodes(self, query, base) -> float:
        """Uncached similarity of two free-standing nodes."""
        return self.node_similarity.similarity(query, base)

    # ──────────────────────────── visualization ────────────────────────────
    def set_matching_info_in_query_and_base(self, solution):
        """
        Write mapping index and node similarity into both graphs so that
        corresponding points can be shown with the same colour.
        """
        for role, graph in (("Query", self._cg_query), ("Base", self._cg_base)):
            if graph is None:
                raise ConfigurationError(f"{role} must be set before annotation")
            if not isinstance(graph, SupportsVisualizationAnnotation):
                raise CapabilityNotSupportedError("SupportsVisualizationAnnotation", graph)

        self._prepare()
        self._cg_query.reset_annotation()
        self._cg_base.reset_annotation()

        for k in range(solution.size_heap):
            index_node_query = solution.index_query_from_heap(k)
            index_node_base = solution.index_corresponding_base_node(index_node_query)
            sim = self.similarity_nodes(index_node_query, index_node_base)

            self._cg_query.set_similarity_mapping_nodes(index_node_query, sim)
            self._cg_query.set_mapping_index(index_node_query, k)
            self._cg_base.set_mapping_index(index_node_base, k)
            self._cg_base.set_similarity_mapping_nodes(index_node_base, sim)

    # ─────────────────────────────── reports ───────────────────────────────
    def format_recent_results(self) -> str:
        r = self.recent_results
        return (f"avr pairwise mapping {r.avr_pairwise_mapping_scaled:.3f}\n"
                f"coverage query {r.coverage_query:.3f}\n"
                f"coverage base {r.coverage_base:.3f}\n"
                f"similarity {r.similarity:.3f} scaled {r.similarity_scaled:.3f}\n")

    def node_similarity_matrix(self) -> np.ndarray:
        """Node similarities for all query x base pairs."""
        self._prepare()
        return np.array([[self.similarity_nodes(i, j) for j in range(self.nodes_base)]
                         for i in range(self.nodes_query)])

    def __str__(self) -> str:
        if self._cg_query is None or self._cg_base is None:
            return f"{type(self).__name__}(unassigned)"
        rows = ["  ".join(f"{v:.2f}" for v in row) for row in self.node_similarity_matrix()]
        return "\n".join(rows)
