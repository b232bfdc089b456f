"""
Similarity between two pharmacophore nodes carrying one or more
interaction types.
"""

from __future__ import annotations
from typing import NamedTuple, Optional

import numpy as np

from ..interaction_table import InteractionDistanceTable, default_table
from ..pp_node import PPNode

THRESH_NODE_SIMILARITY = 0.3


class NodeSimilarity(NamedTuple):
    similarity: float
    valid: bool


class PPNodeSimilarity:
    """
    Multiplicative node similarity.

    The similarity matrix holds ``1 - distance`` for every pair of query and
    base interaction types. Every type on the side with more types is
    matched with its best partner on the other side, and these best
    similarities are multiplied, so each extra type lowers the score. With
    equal type counts the query types are the ones matched, and swapping
    query and base can change the result.

    The scorer keeps no state between calls and may be shared.
    """

    def __init__(self, table: Optional[InteractionDistanceTable] = None,
                 threshold: float = THRESH_NODE_SIMILARITY):
        self.table = table if table is not None else default_table()
        self.threshold = threshold

    def similarity_matrix(self, query: PPNode, base: PPNode) -> np.ndarray:
        m = np.empty((query.interaction_type_count, base.interaction_type_count))
        for i, id_query in enumerate(query.interaction_types):
            for j, id_base in enumerate(base.interaction_types):
                m[i, j] = 1.0 - self.table.distance(id_query, id_base)
        return m

    def similarity(self, query: PPNode, base: PPNode) -> float:
        """
        Args:
            query: Query node
            base: Base node

        Returns:
            Similarity in [0, 1]; 1.0 if either node has no interaction types
        """
        if query.interaction_type_count == 0 or base.interaction_type_count == 0:
            return 1.0

        m = self.similarity_matrix(query, base)
        if base.interaction_type_count > query.interaction_type_count:
            best = m.max(axis=0)
        else:
            best = m.max(axis=1)
        return float(np.prod(best))

    def similarity_and_validity(self, query: PPNode, base: PPNode) -> NodeSimilarity:
        sim = self.similarity(query, base)
        return NodeSimilarity(sim, sim >= self.threshold)

    def is_valid_mapping(self, query: PPNode, base: PPNode) -> bool:
        return self.similarity_and_validity(query, base).valid
