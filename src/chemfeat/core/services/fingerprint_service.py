"""Service computing binary fingerprints."""

import logging
from enum import Enum
from typing import Dict, Iterable, Optional

from ..domain.implementations.circular_fingerprinter import CircularFingerprinter
from ..domain.implementations.substructure_keys import SubstructureKeyFingerprinter
from ..domain.models.fingerprint import Fingerprint
from ..domain.models.molecular_graph import MolecularGraph
from ..domain.models.normalization_stage import NormalizationStage

logger = logging.getLogger(__name__)


class FingerprintKind(Enum):
    """Closed set of fingerprint algorithms and the stage each requires."""

    SUBSTRUCTURE_KEYS = ("substructure_keys", NormalizationStage.AROMATICITY_APPLIED)
    CIRCULAR = ("circular", NormalizationStage.RAW)

    def __init__(self, label, stage):
        self.label = label
        self.stage = stage


class FingerprintService:
    """Dispatches fingerprint requests to shared, read-only fingerprinters."""

    def __init__(self, circular_radius: int = 3, circular_length: int = 1024):
        """
        Initialize the service.

        Args:
            circular_radius: Expansion rounds of the circular fingerprint
            circular_length: Folded length of the circular fingerprint
        """
        self._fingerprinters = {
            FingerprintKind.SUBSTRUCTURE_KEYS: SubstructureKeyFingerprinter(),
            FingerprintKind.CIRCULAR: CircularFingerprinter(
                radius=circular_radius, length=circular_length
            ),
        }
        missing = set(FingerprintKind) - set(self._fingerprinters)
        if missing:
            raise ValueError(f"No fingerprinter for {sorted(k.name for k in missing)}")

    def length(self, kind: FingerprintKind) -> int:
        return self._fingerprinters[kind].length

    def calculate(self, graph: MolecularGraph, kind: FingerprintKind) -> Fingerprint:
        """
        Compute one fingerprint.

        Args:
            graph: Molecular graph; substructure keys need a normalized graph
            kind: Algorithm to use

        Returns:
            Fingerprint of the molecule

        Raises:
            PreconditionViolation: If the graph has not reached the stage
                the algorithm requires
        """
        graph.require_stage(kind.stage, f"Fingerprint {kind.name}")
        fingerprint = self._fingerprinters[kind].fingerprint(graph)
        logger.debug("%s: %d bits set", kind.label, fingerprint.cardinality)
        return fingerprint

    def calculate_all(
        self,
        graph: MolecularGraph,
        kinds: Optional[Iterable[FingerprintKind]] = None,
    ) -> Dict[FingerprintKind, Fingerprint]:
        kinds = tuple(kinds) if kinds is not None else tuple(FingerprintKind)
        return {kind: self.calculate(graph, kind) for kind in kinds}
