"""
Pharmacophore nodes of the Flexophore complete graph.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Tuple
import re

from .exceptions import InvalidGraphError

MAX_INTERACTION_ID = 30000
SEPARATOR_INTERACTION_TYPES = ","

_NODE_PATTERN = re.compile(r"^\(([0-9,\s]*)\)(h?)(\*?)$")


@dataclass(frozen=True)
class PPNode:
    """
    A pharmacophore point. One node may carry several interaction types,
    e.g. when atoms with different interaction classes share one position.

    Interaction ids are kept sorted and unique, so two nodes with the same
    types compare equal regardless of the order they were given in.
    """
    interaction_types: Tuple[int, ...] = ()
    hetero: bool = False
    mandatory: bool = False

    def __post_init__(self):
        ids = sorted(set(int(t) for t in self.interaction_types))
        for t in ids:
            if t < 0 or t > MAX_INTERACTION_ID:
                raise InvalidGraphError(
                    f"Interaction type {t} outside [0, {MAX_INTERACTION_ID}].")
        object.__setattr__(self, "interaction_types", tuple(ids))

    @classmethod
    def of(cls, *interaction_types: int, hetero: bool = False,
           mandatory: bool = False) -> 'PPNode':
        return cls(tuple(interaction_types), hetero=hetero, mandatory=mandatory)

    @property
    def interaction_type_count(self) -> int:
        return len(self.interaction_types)

    def interaction_id(self, i: int) -> int:
        return self.interaction_types[i]

    def contains_interaction_id(self, interaction_id: int) -> bool:
        return interaction_id in self.interaction_types

    def has_hetero_atom(self) -> bool:
        return self.hetero

    def is_carbon_exclusive_node(self) -> bool:
        return not self.hetero

    def merge(self, other: 'PPNode') -> 'PPNode':
        """Node with the union of both interaction types; flags are or-ed."""
        return PPNode(self.interaction_types + other.interaction_types,
                      hetero=self.hetero or other.hetero,
                      mandatory=self.mandatory or other.mandatory)

    def with_mandatory(self, mandatory: bool = True) -> 'PPNode':
        return PPNode(self.interaction_types, hetero=self.hetero, mandatory=mandatory)

    def equal_atoms(self, other: 'PPNode') -> bool:
        """True if both nodes carry the same interaction types."""
        return self.interaction_types == other.interaction_types

    def __str__(self) -> str:
        s = "(" + SEPARATOR_INTERACTION_TYPES.join(str(t) for t in self.interaction_types) + ")"
        if self.hetero:
            s += "h"
        if self.mandatory:
            s += "*"
        return s

    @classmethod
    def read(cls, text: str) -> 'PPNode':
        """Parse the string form, e.g. ``(3,12)h*``."""
        m = _NODE_PATTERN.match(text.strip())
        if m is None:
            raise InvalidGraphError(f"Malformed pharmacophore node '{text}'.")
        body, hetero, mandatory = m.groups()
        ids = [int(t) for t in body.replace(" ", "").split(SEPARATOR_INTERACTION_TYPES) if t]
        return cls(tuple(ids), hetero=bool(hetero), mandatory=bool(mandatory))


def nodes_from_types(types: Iterable[Iterable[int]], hetero: bool = True) -> Tuple[PPNode, ...]:
    """Convenience constructor for a list of nodes sharing one hetero flag."""
    return tuple(PPNode(tuple(t), hetero=hetero) for t in types)
