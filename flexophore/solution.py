"""
Candidate node-to-node mappings between a query and a base graph.
"""

from __future__ import annotations
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple
import random


class Solution:
    """
    Partial injective mapping from query node indices to base node indices.

    The pairs are kept in insertion order (the "heap"); scoring iterates
    over the heap, so a solution built from the same pairs in another order
    addresses the same cache slots and yields the same score.
    """

    def __init__(self, pairs: Iterable[Tuple[int, int]] = ()):
        self._heap: List[Tuple[int, int]] = []
        self._query_to_base: Dict[int, int] = {}
        self._base_to_query: Dict[int, int] = {}
        for index_query, index_base in pairs:
            self.add(index_query, index_base)

    @classmethod
    def from_mapping(cls, mapping: Mapping[int, int]) -> 'Solution':
        return cls(mapping.items())

    def add(self, index_query: int, index_base: int) -> None:
        index_query, index_base = int(index_query), int(index_base)
        if index_query < 0 or index_base < 0:
            raise ValueError(f"Negative node index in pair ({index_query}, {index_base})")
        if index_query in self._query_to_base:
            raise ValueError(f"Query node {index_query} is already mapped")
        if index_base in self._base_to_query:
            raise ValueError(f"Base node {index_base} is already mapped")
        self._heap.append((index_query, index_base))
        self._query_to_base[index_query] = index_base
        self._base_to_query[index_base] = index_query

    @property
    def size_heap(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(self._heap)

    def index_query_from_heap(self, k: int) -> int:
        return self._heap[k][0]

    def index_base_from_heap(self, k: int) -> int:
        return self._heap[k][1]

    def index_corresponding_base_node(self, index_query: int) -> int:
        try:
            return self._query_to_base[index_query]
        except KeyError:
            raise KeyError(f"Query node {index_query} is not part of the solution") from None

    def query_indices(self) -> List[int]:
        return [q for q, _ in self._heap]

    def base_indices(self) -> List[int]:
        return [b for _, b in self._heap]

    def shuffled(self, rng: Optional[random.Random] = None) -> 'Solution':
        """Same mapping with the heap order permuted."""
        rng = rng or random.Random()
        pairs = list(self._heap)
        rng.shuffle(pairs)
        return Solution(pairs)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Solution):
            return NotImplemented
        return self._query_to_base == other._query_to_base

    def __repr__(self) -> str:
        body = ", ".join(f"{q}->{b}" for q, b in self._heap)
        return f"Solution([{body}])"
