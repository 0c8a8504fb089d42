"""Service that brings a molecular graph into canonical, featurizable form."""

import logging

from ..domain.implementations.aromaticity import apply_aromaticity
from ..domain.implementations.atom_typer import perceive_atom_types
from ..domain.models.bond import BondOrder
from ..domain.models.molecular_graph import MolecularGraph
from ..domain.models.normalization_stage import NormalizationStage

logger = logging.getLogger(__name__)


class NormalizationService:
    """
    Runs the normalization steps in their mandatory order.

    Hydrogens are made explicit, atom types perceived, then aromaticity
    detected. Each step records the stage it reached on the graph and
    refuses to run before its predecessor, so calling a step out of order
    raises ``PreconditionViolation``.
    """

    def normalize(self, graph: MolecularGraph) -> MolecularGraph:
        """
        Normalize a graph in place.

        Args:
            graph: Graph to normalize

        Returns:
            The same graph, at stage AROMATICITY_APPLIED
        """
        self.make_hydrogens_explicit(graph)
        self.perceive_atom_types(graph)
        self.detect_aromaticity(graph)
        return graph

    def make_hydrogens_explicit(self, graph: MolecularGraph) -> MolecularGraph:
        """Replace implicit hydrogen counts by bonded H atoms."""
        added = 0
        # Snapshot: atoms appended below must not be visited.
        for atom in list(graph.atoms):
            count = atom.implicit_hydrogens
            atom.implicit_hydrogens = 0
            for _ in range(count):
                hydrogen = graph.add_atom("H")
                graph.add_bond(atom.index, hydrogen.index, BondOrder.SINGLE)
                added += 1

        for atom in graph.atoms:
            atom.explicit_hydrogens = sum(
                1 for n in graph.neighbors(atom.index) if graph.atoms[n].is_hydrogen
            )

        if added:
            logger.debug("Added %d explicit hydrogen(s)", added)
        graph.stage = NormalizationStage.HYDROGENS_EXPLICIT
        return graph

    def perceive_atom_types(self, graph: MolecularGraph) -> MolecularGraph:
        """Assign an atom type tag to every atom."""
        graph.require_stage(NormalizationStage.HYDROGENS_EXPLICIT, "Atom-type perception")
        perceive_atom_types(graph)
        graph.stage = NormalizationStage.ATOM_TYPES_PERCEIVED
        return graph

    def detect_aromaticity(self, graph: MolecularGraph) -> MolecularGraph:
        """Flag atoms and bonds of rings that satisfy the 4n+2 rule."""
        graph.require_stage(
            NormalizationStage.ATOM_TYPES_PERCEIVED, "Aromaticity detection"
        )
        apply_aromaticity(graph)
        graph.stage = NormalizationStage.AROMATICITY_APPLIED
        return graph
