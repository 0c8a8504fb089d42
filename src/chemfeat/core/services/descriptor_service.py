"""Service computing topological and physicochemical descriptors."""

import logging
from enum import Enum
from typing import Iterable, Optional, Tuple

import networkx as nx
import numpy as np
from rdkit import Chem

from ..domain.implementations import ghose_crippen
from ..domain.models.descriptor_result import DescriptorResult
from ..domain.models.molecular_graph import MolecularGraph
from ..domain.models.normalization_stage import NormalizationStage
from ..errors import DegenerateGraphError, FeaturizationError

logger = logging.getLogger(__name__)

_PERIODIC_TABLE = Chem.GetPeriodicTable()

MAX_MOLECULAR_WEIGHT = 500.0
MAX_LOGP = 5.0
MAX_DONORS = 5
MAX_ACCEPTORS = 10

# Nitrogen types whose lone pair is delocalised and not counted as acceptor
_NON_ACCEPTOR_NITROGEN = frozenset({"N.amide", "N.planar3"})


def zagreb_index(graph: MolecularGraph) -> Tuple[float]:
    """Sum of squared atom degrees, hydrogens included."""
    return (float(sum(graph.degree(atom.index) ** 2 for atom in graph.atoms)),)


def distance_matrix(graph: MolecularGraph) -> np.ndarray:
    """
    Topological distances between heavy atoms.

    Args:
        graph: Molecular graph

    Returns:
        Square matrix over heavy atoms (in index order) with ``inf`` for
        pairs in different connected components
    """
    skeleton = graph.to_networkx(heavy_only=True)
    nodes = sorted(skeleton.nodes)
    position = {node: i for i, node in enumerate(nodes)}
    distances = np.full((len(nodes), len(nodes)), np.inf)
    for node in nodes:
        for target, length in nx.single_source_shortest_path_length(skeleton, node).items():
            distances[position[node], position[target]] = length
    return distances


def graph_diameter_and_radius(graph: MolecularGraph) -> Tuple[int, int]:
    """Diameter and radius of the hydrogen-suppressed skeleton.

    Raises:
        DegenerateGraphError: If the skeleton has no pair of connected atoms
    """
    distances = distance_matrix(graph)
    if distances.size == 0:
        raise DegenerateGraphError("Graph has no heavy atoms")
    finite = np.where(np.isfinite(distances), distances, 0.0)
    eccentricities = finite.max(axis=1)
    diameter = int(eccentricities.max())
    if diameter == 0:
        raise DegenerateGraphError("Graph diameter is zero")
    return diameter, int(eccentricities.min())


def petitjean_number(graph: MolecularGraph) -> Tuple[float]:
    """(diameter - radius) / diameter, or 0.0 for degenerate graphs."""
    try:
        diameter, radius = graph_diameter_and_radius(graph)
    except DegenerateGraphError as e:
        logger.debug("Petitjean number set to 0: %s", e)
        return (0.0,)
    return ((diameter - radius) / diameter,)


def alogp(graph: MolecularGraph) -> Tuple[float, float, float]:
    """Ghose-Crippen LogP, its square, and molar refractivity."""
    logp, refractivity = ghose_crippen.contributions(graph)
    return logp, logp * logp, refractivity


def molecular_weight(graph: MolecularGraph) -> float:
    """
    Average molecular weight, counting any remaining implicit hydrogens.

    Labelled atoms use the mass of their isotope.
    """
    hydrogen = _PERIODIC_TABLE.GetAtomicWeight("H")
    return sum(
        (
            _PERIODIC_TABLE.GetMassForIsotope(atom.element, atom.isotope)
            if atom.isotope
            else _PERIODIC_TABLE.GetAtomicWeight(atom.element)
        )
        + atom.implicit_hydrogens * hydrogen
        for atom in graph.atoms
    )


def hydrogen_bond_donors(graph: MolecularGraph) -> int:
    return sum(
        1
        for atom in graph.atoms
        if atom.element in ("N", "O") and graph.hydrogen_count(atom.index) > 0
    )


def hydrogen_bond_acceptors(graph: MolecularGraph) -> int:
    count = 0
    for atom in graph.atoms:
        if atom.charge > 0:
            continue
        if atom.element == "O":
            count += 1
        elif atom.element == "N" and atom.atom_type not in _NON_ACCEPTOR_NITROGEN:
            count += 1
    return count


def rule_of_five_failures(graph: MolecularGraph) -> Tuple[int]:
    """Number of Lipinski thresholds the molecule violates."""
    logp = alogp(graph)[0]
    violations = [
        molecular_weight(graph) > MAX_MOLECULAR_WEIGHT,
        logp > MAX_LOGP,
        hydrogen_bond_donors(graph) > MAX_DONORS,
        hydrogen_bond_acceptors(graph) > MAX_ACCEPTORS,
    ]
    return (sum(violations),)


class DescriptorKind(Enum):
    """
    Closed set of descriptors.

    Each member carries the names of the values it produces, the
    normalization stage its input must have reached, and its compute
    function.
    """

    ZAGREB = (("Zagreb",), NormalizationStage.HYDROGENS_EXPLICIT, zagreb_index)
    PETITJEAN = (("PetitjeanNumber",), NormalizationStage.RAW, petitjean_number)
    RULE_OF_FIVE = (
        ("LipinskiFailures",),
        NormalizationStage.AROMATICITY_APPLIED,
        rule_of_five_failures,
    )
    ALOGP = (("ALogP", "ALogp2", "AMR"), NormalizationStage.AROMATICITY_APPLIED, alogp)

    def __init__(self, labels, stage, compute):
        self.labels = labels
        self.stage = stage
        self.compute = compute


class DescriptorService:
    """Computes descriptor values without modifying the graph."""

    def __init__(self, kinds: Optional[Iterable[DescriptorKind]] = None):
        self.kinds = tuple(kinds) if kinds is not None else tuple(DescriptorKind)

    def calculate(
        self,
        graph: MolecularGraph,
        kinds: Optional[Iterable[DescriptorKind]] = None,
    ) -> DescriptorResult:
        """
        Calculate descriptors for one molecule.

        A descriptor that fails is recorded in ``failures`` and the others
        are still computed.

        Args:
            graph: Normalized molecular graph
            kinds: Descriptors to compute, defaults to those configured

        Returns:
            DescriptorResult with values and per-descriptor failures

        Raises:
            PreconditionViolation: If the graph has not reached a stage
                required by one of the descriptors
        """
        kinds = tuple(kinds) if kinds is not None else self.kinds
        for kind in kinds:
            graph.require_stage(kind.stage, f"Descriptor {kind.name}")

        result = DescriptorResult()
        for kind in kinds:
            try:
                values = kind.compute(graph)
            except FeaturizationError as e:
                logger.warning("Descriptor %s failed: %s", kind.name, e)
                for label in kind.labels:
                    result.failures[label] = e
                continue
            result.values.update(zip(kind.labels, values))
        return result
