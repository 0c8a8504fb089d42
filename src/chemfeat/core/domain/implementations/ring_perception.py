"""Ring perception over the heavy-atom skeleton of a molecular graph."""

from typing import List, Set, Tuple

import networkx as nx

from ..models.bond import Bond
from ..models.molecular_graph import MolecularGraph

Ring = Tuple[int, ...]


def find_sssr(graph: MolecularGraph) -> List[Ring]:
    """
    Smallest set of smallest rings.

    Computed per connected component as a minimum cycle basis of the
    hydrogen-free graph. Each ring is returned as a sorted tuple of atom
    indices and the list is ordered by ring size then atom indices, so the
    result does not depend on how NetworkX walks the graph.

    Args:
        graph: Molecular graph in any normalization stage

    Returns:
        List of rings
    """
    skeleton = graph.to_networkx(heavy_only=True)
    if skeleton.number_of_edges() == 0:
        return []
    rings = [tuple(sorted(cycle)) for cycle in nx.minimum_cycle_basis(skeleton)]
    return sorted(rings, key=lambda ring: (len(ring), ring))


def ring_bonds(graph: MolecularGraph, ring: Ring) -> List[Bond]:
    """Bonds joining two atoms of the ring."""
    members = set(ring)
    return [
        bond
        for bond in graph.bonds
        if bond.atom1_id in members and bond.atom2_id in members
    ]


def ring_atom_set(graph: MolecularGraph) -> Set[int]:
    """Indices of all atoms lying on at least one cycle."""
    skeleton = graph.to_networkx(heavy_only=True)
    members: Set[int] = set()
    for cycle in nx.cycle_basis(skeleton):
        members.update(cycle)
    return members
