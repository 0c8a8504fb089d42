"""Extended-connectivity (circular) fingerprint."""

import hashlib
import logging
import struct
from typing import Dict, Iterable, Set

from rdkit import Chem

from ..models.fingerprint import Fingerprint
from ..models.molecular_graph import MolecularGraph
from .aromaticity import apply_aromaticity
from .atom_typer import perceive_atom_types
from .ring_perception import ring_atom_set

logger = logging.getLogger(__name__)

_PERIODIC_TABLE = Chem.GetPeriodicTable()

AROMATIC_BOND_CODE = 4


def stable_hash(values: Iterable[int]) -> int:
    """32-bit hash of a sequence of integers, identical across processes."""
    values = list(values)
    data = struct.pack(f"<{len(values)}q", *values)
    return int.from_bytes(hashlib.blake2b(data, digest_size=4).digest(), "little")


class CircularFingerprinter:
    """
    ECFP-style fingerprint over heavy atoms.

    Each atom starts from a hash of its element, charge, heavy degree,
    hydrogen count and ring membership. Every round replaces the identifier
    with a hash of the previous one and the sorted (bond, neighbour
    identifier) pairs. All identifiers from all rounds are folded into
    ``length`` bits.

    Aromaticity and hydrogen counts are derived from a private copy of the
    input, so it makes no difference whether hydrogens are implicit or
    explicit or whether the graph was already normalized.
    """

    kind = "circular"

    def __init__(self, radius: int = 3, length: int = 1024):
        """
        Args:
            radius: Number of neighbourhood-expansion rounds (3 gives ECFP6)
            length: Folded bit-length
        """
        if radius < 0:
            raise ValueError(f"radius must be non-negative, got {radius}")
        if length <= 0:
            raise ValueError(f"length must be positive, got {length}")
        self.radius = radius
        self.length = length

    def _prepare(self, graph: MolecularGraph) -> MolecularGraph:
        working = graph.copy()
        perceive_atom_types(working)
        apply_aromaticity(working)
        return working

    def _initial_identifiers(self, graph: MolecularGraph) -> Dict[int, int]:
        in_ring = ring_atom_set(graph)
        identifiers = {}
        for atom in graph.heavy_atoms():
            identifiers[atom.index] = stable_hash(
                (
                    _PERIODIC_TABLE.GetAtomicNumber(atom.element),
                    atom.charge,
                    graph.heavy_degree(atom.index),
                    graph.hydrogen_count(atom.index),
                    int(atom.index in in_ring),
                )
            )
        return identifiers

    def raw_features(self, graph: MolecularGraph) -> Set[int]:
        """Distinct identifiers of every atom environment up to the radius."""
        working = self._prepare(graph)
        identifiers = self._initial_identifiers(working)
        features = set(identifiers.values())

        for iteration in range(1, self.radius + 1):
            updated = {}
            for atom_id, identifier in identifiers.items():
                environment = sorted(
                    (
                        AROMATIC_BOND_CODE if bond.aromatic else int(bond.order),
                        identifiers[bond.other(atom_id)],
                    )
                    for bond in working.bonds_of(atom_id)
                    if bond.other(atom_id) in identifiers
                )
                values = [iteration, identifier]
                for bond_code, neighbor_identifier in environment:
                    values.extend((bond_code, neighbor_identifier))
                updated[atom_id] = stable_hash(values)
            identifiers = updated
            features.update(identifiers.values())

        logger.debug("%d circular features before folding", len(features))
        return features

    def fingerprint(self, graph: MolecularGraph) -> Fingerprint:
        """Folded circular fingerprint of a graph in any normalization stage."""
        bits = {feature % self.length for feature in self.raw_features(graph)}
        return Fingerprint.from_indices(bits, self.length, self.kind)
