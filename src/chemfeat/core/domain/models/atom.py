#!/usr/bin/env python3
# src/chemfeat/core/domain/models/atom.py

"""
Domain model representing an atom in a molecular graph.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Atom:
    """Represents an atom in a molecular graph."""

    index: int
    element: str
    charge: int = 0
    implicit_hydrogens: int = 0
    explicit_hydrogens: int = 0
    aromatic: Optional[bool] = None
    atom_type: Optional[str] = None
    # Mass number, 0 for natural abundance
    isotope: int = 0
    # Tetrahedral parity "CW" or "CCW", relative to the order of the atom's bonds
    chirality: Optional[str] = None

    @property
    def is_hydrogen(self) -> bool:
        return self.element == "H"

    def state(self) -> tuple:
        """Tuple of every attribute, used to compare atom state exactly."""
        return (
            self.index,
            self.element,
            self.charge,
            self.implicit_hydrogens,
            self.explicit_hydrogens,
            self.aromatic,
            self.atom_type,
            self.isotope,
            self.chirality,
        )
