#!/usr/bin/env python3
# src/chemfeat/core/domain/models/molecular_graph.py

"""
Domain model representing a small molecule as a graph.
"""

import copy
from typing import Any, Dict, List, Optional

import networkx as nx

from ...errors import PreconditionViolation
from .atom import Atom
from .bond import Bond, BondOrder
from .normalization_stage import NormalizationStage


class MolecularGraph:
    """Graph representation of a molecule: ordered atoms and bonds."""

    def __init__(
        self,
        atoms: Optional[List[Atom]] = None,
        bonds: Optional[List[Bond]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize a MolecularGraph.

        Args:
            atoms: List of Atom objects, indexed by position
            bonds: List of Bond objects between those atoms
            metadata: Record-level properties (name, identifiers) carried
                through untouched
        """
        self.atoms: List[Atom] = []
        self.bonds: List[Bond] = []
        self.metadata: Dict[str, Any] = dict(metadata or {})
        self.stage = NormalizationStage.RAW
        self._adjacency: Optional[Dict[int, List[Bond]]] = None
        self._bond_index: Dict[frozenset, Bond] = {}

        for atom in atoms or []:
            if atom.index != len(self.atoms):
                raise ValueError(
                    f"Atom index {atom.index} does not match its position "
                    f"{len(self.atoms)}"
                )
            self.atoms.append(atom)
        for bond in bonds or []:
            self._register_bond(bond)

    def __len__(self) -> int:
        return len(self.atoms)

    def __repr__(self) -> str:
        return (
            f"MolecularGraph(atoms={len(self.atoms)}, bonds={len(self.bonds)}, "
            f"stage={self.stage.name})"
        )

    def add_atom(
        self,
        element: str,
        charge: int = 0,
        implicit_hydrogens: int = 0,
        isotope: int = 0,
        chirality: Optional[str] = None,
    ) -> Atom:
        """Append a new atom and return it."""
        atom = Atom(
            index=len(self.atoms),
            element=element,
            charge=charge,
            implicit_hydrogens=implicit_hydrogens,
            isotope=isotope,
            chirality=chirality,
        )
        self.atoms.append(atom)
        self._adjacency = None
        self.stage = NormalizationStage.RAW
        return atom

    def add_bond(
        self, atom1_id: int, atom2_id: int, order: BondOrder = BondOrder.SINGLE
    ) -> Bond:
        """Join two existing atoms with a new bond and return it."""
        bond = Bond(atom1_id, atom2_id, BondOrder(order))
        self._register_bond(bond)
        self.stage = NormalizationStage.RAW
        return bond

    def _register_bond(self, bond: Bond) -> None:
        for atom_id in (bond.atom1_id, bond.atom2_id):
            if not 0 <= atom_id < len(self.atoms):
                raise ValueError(f"Bond references unknown atom {atom_id}")
        if bond.atom1_id == bond.atom2_id:
            raise ValueError(f"Self-loop on atom {bond.atom1_id}")
        if bond.key in self._bond_index:
            raise ValueError(
                f"Atoms {bond.atom1_id} and {bond.atom2_id} are already bonded"
            )
        self._bond_index[bond.key] = bond
        self.bonds.append(bond)
        self._adjacency = None

    @property
    def adjacency(self) -> Dict[int, List[Bond]]:
        """Bonds incident to each atom, derived on demand."""
        if self._adjacency is None:
            adjacency: Dict[int, List[Bond]] = {a.index: [] for a in self.atoms}
            for bond in self.bonds:
                adjacency[bond.atom1_id].append(bond)
                adjacency[bond.atom2_id].append(bond)
            self._adjacency = adjacency
        return self._adjacency

    def bonds_of(self, atom_id: int) -> List[Bond]:
        return self.adjacency[atom_id]

    def neighbors(self, atom_id: int) -> List[int]:
        return [bond.other(atom_id) for bond in self.adjacency[atom_id]]

    def bond_between(self, atom1_id: int, atom2_id: int) -> Optional[Bond]:
        return self._bond_index.get(frozenset((atom1_id, atom2_id)))

    def degree(self, atom_id: int) -> int:
        """Number of explicit bonds on an atom."""
        return len(self.adjacency[atom_id])

    def heavy_degree(self, atom_id: int) -> int:
        return sum(1 for n in self.neighbors(atom_id) if not self.atoms[n].is_hydrogen)

    def hydrogen_count(self, atom_id: int) -> int:
        """Total attached hydrogens, implicit plus explicit neighbours."""
        explicit = sum(1 for n in self.neighbors(atom_id) if self.atoms[n].is_hydrogen)
        return self.atoms[atom_id].implicit_hydrogens + explicit

    def heavy_atoms(self) -> List[Atom]:
        return [atom for atom in self.atoms if not atom.is_hydrogen]

    def to_networkx(self, heavy_only: bool = False) -> nx.Graph:
        """Convert to a NetworkX graph keyed by atom index."""
        G = nx.Graph()

        for atom in self.atoms:
            if heavy_only and atom.is_hydrogen:
                continue
            G.add_node(atom.index, element=atom.element, charge=atom.charge)

        for bond in self.bonds:
            if bond.atom1_id in G and bond.atom2_id in G:
                G.add_edge(bond.atom1_id, bond.atom2_id, order=int(bond.order))

        return G

    def require_stage(self, stage: NormalizationStage, operation: str) -> None:
        """Fail fast when the graph has not reached ``stage``."""
        if self.stage < stage:
            raise PreconditionViolation(operation, stage, self.stage)

    def copy(self) -> "MolecularGraph":
        """Deep copy; the copy shares no mutable state with this graph."""
        return copy.deepcopy(self)

    def state(self) -> tuple:
        """Exact atom and bond state, used for idempotence comparisons."""
        return (
            tuple(atom.state() for atom in self.atoms),
            tuple(bond.state() for bond in self.bonds),
        )
