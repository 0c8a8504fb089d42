"""Hückel aromaticity over the smallest set of smallest rings."""

import logging
from typing import List, Optional

from ..models.bond import BondOrder
from ..models.molecular_graph import MolecularGraph
from .ring_perception import Ring, find_sssr, ring_bonds

logger = logging.getLogger(__name__)

# Atom types able to carry a pi bond inside an aromatic ring
SP2_TYPES = frozenset(
    {
        "C.sp2",
        "C.plus.sp2",
        "C.minus.sp2",
        "N.sp2",
        "N.plus.sp2",
        "N.minus.sp2",
        "O.plus.sp2",
        "S.2",
        "Se.2",
    }
)

# Atom types donating a lone pair (two electrons) to the ring
LONE_PAIR_DONORS = frozenset(
    {"N.planar3", "N.minus.planar3", "O.planar3", "S.planar3", "Se.3", "C.minus.planar"}
)

# Atom types contributing an empty p orbital
EMPTY_ORBITAL = frozenset({"C.plus.planar"})

_ELECTRONEGATIVE = frozenset({"N", "O", "S"})


def pi_electron_contribution(
    graph: MolecularGraph, atom_id: int, ring: Ring
) -> Optional[int]:
    """
    Electrons an atom donates to the pi system of one ring.

    Args:
        graph: Graph with perceived atom types
        atom_id: Ring atom to evaluate
        ring: Ring the atom belongs to

    Returns:
        0, 1 or 2, or None when the atom is not sp2-compatible
    """
    atom = graph.atoms[atom_id]
    members = set(ring)
    in_ring_double = False
    exocyclic_double = None
    for bond in graph.bonds_of(atom_id):
        if bond.order == BondOrder.TRIPLE:
            return None
        if bond.order == BondOrder.DOUBLE:
            partner = bond.other(atom_id)
            if partner in members:
                in_ring_double = True
            else:
                exocyclic_double = partner

    if in_ring_double or exocyclic_double is not None:
        if atom.atom_type not in SP2_TYPES:
            return None
        if in_ring_double:
            return 1
        if graph.atoms[exocyclic_double].element in _ELECTRONEGATIVE:
            return 0
        return 1
    if atom.atom_type in LONE_PAIR_DONORS:
        return 2
    if atom.atom_type in EMPTY_ORBITAL:
        return 0
    return None


def is_aromatic_ring(graph: MolecularGraph, ring: Ring) -> bool:
    """Apply the 4n+2 rule to a single ring."""
    electrons = 0
    for atom_id in ring:
        contribution = pi_electron_contribution(graph, atom_id, ring)
        if contribution is None:
            return False
        electrons += contribution
    return electrons % 4 == 2


def apply_aromaticity(graph: MolecularGraph) -> List[Ring]:
    """
    Flag atoms and bonds of every aromatic ring.

    Each ring of the SSSR is evaluated on its own; fused systems are
    aromatic only where each elementary ring passes the rule. Flags from any
    previous run are cleared first.

    Args:
        graph: Graph with perceived atom types

    Returns:
        The rings found aromatic
    """
    for atom in graph.atoms:
        atom.aromatic = False
    for bond in graph.bonds:
        bond.aromatic = False

    aromatic_rings = []
    for ring in find_sssr(graph):
        if not is_aromatic_ring(graph, ring):
            continue
        aromatic_rings.append(ring)
        for atom_id in ring:
            graph.atoms[atom_id].aromatic = True
        for bond in ring_bonds(graph, ring):
            bond.aromatic = True

    logger.debug("%d aromatic ring(s) detected", len(aromatic_rings))
    return aromatic_rings
