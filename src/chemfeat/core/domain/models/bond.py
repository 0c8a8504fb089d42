#!/usr/bin/env python3
# src/chemfeat/core/domain/models/bond.py

"""
Domain model representing a chemical bond between atoms.
"""

from dataclasses import dataclass
from enum import IntEnum


class BondOrder(IntEnum):
    """Enumeration of primitive bond orders.

    Aromaticity is a derived flag on the bond, never an order.
    """

    SINGLE = 1
    DOUBLE = 2
    TRIPLE = 3


@dataclass
class Bond:
    """Represents an undirected chemical bond between two atoms."""

    atom1_id: int
    atom2_id: int
    order: BondOrder = BondOrder.SINGLE
    aromatic: bool = False

    def other(self, atom_id: int) -> int:
        """Return the index of the atom at the opposite end of the bond."""
        if atom_id == self.atom1_id:
            return self.atom2_id
        if atom_id == self.atom2_id:
            return self.atom1_id
        raise ValueError(f"Atom {atom_id} is not part of bond {self.key}")

    @property
    def key(self) -> frozenset:
        return frozenset((self.atom1_id, self.atom2_id))

    def state(self) -> tuple:
        return (self.atom1_id, self.atom2_id, int(self.order), self.aromatic)
