"""Atom-type perception.

Each atom is assigned a tag such as ``C.sp2`` or ``N.planar3`` from its
element, formal charge and the number of double and triple bonds it carries,
followed by a small set of context refinements (amide, conjugated lone
pair, nitro). Only Kekulé bond orders are consulted, never aromatic flags,
so perception gives the same answer before and after aromaticity detection.
"""

import logging
from typing import Dict, Tuple

from ..models.bond import BondOrder
from ..models.molecular_graph import MolecularGraph

logger = logging.getLogger(__name__)

UNKNOWN_TYPE = "X"

# (element, formal charge, double bonds, triple bonds) -> base atom type
ATOM_TYPE_TABLE: Dict[Tuple[str, int, int, int], str] = {
    ("H", 0, 0, 0): "H",
    ("H", 1, 0, 0): "H.plus",
    ("H", -1, 0, 0): "H.minus",
    ("B", 0, 0, 0): "B",
    ("C", 0, 0, 0): "C.sp3",
    ("C", 0, 1, 0): "C.sp2",
    ("C", 0, 2, 0): "C.allene",
    ("C", 0, 0, 1): "C.sp",
    ("C", 1, 0, 0): "C.plus.planar",
    ("C", 1, 1, 0): "C.plus.sp2",
    ("C", -1, 0, 0): "C.minus.sp3",
    ("C", -1, 1, 0): "C.minus.sp2",
    ("C", -1, 0, 1): "C.minus.sp1",
    ("N", 0, 0, 0): "N.sp3",
    ("N", 0, 1, 0): "N.sp2",
    ("N", 0, 0, 1): "N.sp1",
    ("N", 1, 0, 0): "N.plus",
    ("N", 1, 1, 0): "N.plus.sp2",
    ("N", 1, 2, 0): "N.plus.sp1",
    ("N", 1, 0, 1): "N.plus.sp1",
    ("N", -1, 0, 0): "N.minus.sp3",
    ("N", -1, 1, 0): "N.minus.sp2",
    ("O", 0, 0, 0): "O.sp3",
    ("O", 0, 1, 0): "O.sp2",
    ("O", 1, 0, 0): "O.plus",
    ("O", 1, 1, 0): "O.plus.sp2",
    ("O", -1, 0, 0): "O.minus",
    ("F", 0, 0, 0): "F",
    ("F", -1, 0, 0): "F.minus",
    ("Si", 0, 0, 0): "Si.sp3",
    ("P", 0, 0, 0): "P.ine",
    ("P", 0, 1, 0): "P.ate",
    ("P", 1, 0, 0): "P.plus",
    ("S", 0, 0, 0): "S.3",
    ("S", 0, 1, 0): "S.2",
    ("S", 0, 2, 0): "S.onyl",
    ("S", 1, 0, 0): "S.plus",
    ("S", -1, 0, 0): "S.minus",
    ("Cl", 0, 0, 0): "Cl",
    ("Cl", -1, 0, 0): "Cl.minus",
    ("Se", 0, 0, 0): "Se.3",
    ("Se", 0, 1, 0): "Se.2",
    ("Br", 0, 0, 0): "Br",
    ("Br", -1, 0, 0): "Br.minus",
    ("I", 0, 0, 0): "I",
    ("I", -1, 0, 0): "I.minus",
}

# Types whose lone pair can join a neighbouring pi system.
_CONJUGABLE = {
    "N.sp3": "N.planar3",
    "N.minus.sp3": "N.minus.planar3",
    "O.sp3": "O.planar3",
    "S.3": "S.planar3",
    "C.minus.sp3": "C.minus.planar",
}

_CHALCOGENS = ("O", "S")


def _bond_counts(graph: MolecularGraph, atom_id: int) -> Tuple[int, int]:
    doubles = triples = 0
    for bond in graph.bonds_of(atom_id):
        if bond.order == BondOrder.DOUBLE:
            doubles += 1
        elif bond.order == BondOrder.TRIPLE:
            triples += 1
    return doubles, triples


def _is_unsaturated(graph: MolecularGraph, atom_id: int) -> bool:
    return any(bond.order > BondOrder.SINGLE for bond in graph.bonds_of(atom_id))


def _is_acyl_carbon(graph: MolecularGraph, atom_id: int) -> bool:
    """True for a carbon double bonded to O or S (C=O, C=S)."""
    if graph.atoms[atom_id].element != "C":
        return False
    return any(
        bond.order == BondOrder.DOUBLE
        and graph.atoms[bond.other(atom_id)].element in _CHALCOGENS
        for bond in graph.bonds_of(atom_id)
    )


def perceive_atom_type(graph: MolecularGraph, atom_id: int) -> str:
    """
    Classify a single atom.

    Args:
        graph: Graph with explicit hydrogens
        atom_id: Index of the atom to classify

    Returns:
        Atom type tag, ``X`` when no table entry matches
    """
    atom = graph.atoms[atom_id]
    doubles, triples = _bond_counts(graph, atom_id)
    base = ATOM_TYPE_TABLE.get((atom.element, atom.charge, doubles, triples))
    if base is None:
        return UNKNOWN_TYPE

    neighbors = graph.neighbors(atom_id)

    if base == "S.2" and len(neighbors) > 1:
        # S(=O)(R)R sulfoxide rather than thione sulfur
        return "S.inyl"

    if base == "N.plus.sp2":
        oxygens = sum(1 for n in neighbors if graph.atoms[n].element == "O")
        return "N.nitro" if oxygens >= 2 else base

    if base == "N.sp3" and any(_is_acyl_carbon(graph, n) for n in neighbors):
        return "N.amide"

    if base in _CONJUGABLE and any(_is_unsaturated(graph, n) for n in neighbors):
        return _CONJUGABLE[base]

    return base


def perceive_atom_types(graph: MolecularGraph) -> None:
    """Assign ``atom_type`` on every atom of the graph in place."""
    unknown = 0
    for atom in graph.atoms:
        atom.atom_type = perceive_atom_type(graph, atom.index)
        if atom.atom_type == UNKNOWN_TYPE:
            unknown += 1
    if unknown:
        logger.debug("%d atom(s) left untyped", unknown)
