"""Per-molecule feature extraction pipeline and its batch runner."""

import logging
from concurrent.futures import FIRST_COMPLETED, ProcessPoolExecutor, wait
from dataclasses import dataclass, field
from itertools import islice
from typing import Callable, Dict, Iterable, Iterator, Optional

from ..config import FeaturizationSettings
from ..domain.models.descriptor_result import DescriptorResult
from ..domain.models.fingerprint import Fingerprint
from ..domain.models.molecular_graph import MolecularGraph
from ..errors import FeaturizationError
from .descriptor_service import DescriptorService, molecular_weight
from .fingerprint_service import FingerprintKind, FingerprintService
from .normalization_service import NormalizationService
from .similarity_service import SimilarityService

logger = logging.getLogger(__name__)

# Called as canonicalizer(graph, isomeric=...)
Canonicalizer = Callable[..., str]


@dataclass
class FeatureRecord:
    """Everything extracted from one molecule."""

    metadata: Dict = field(default_factory=dict)
    # Absolute SMILES, with isotopes and tetrahedral stereo
    canonical_smiles: Optional[str] = None
    # Unique SMILES of the constitution only
    unique_smiles: Optional[str] = None
    molecular_weight: Optional[float] = None
    # Counts as read, before hydrogens are made explicit
    atom_count: int = 0
    implicit_hydrogen_count: int = 0
    explicit_atom_count: int = 0
    descriptors: DescriptorResult = field(default_factory=DescriptorResult)
    fingerprints: Dict[FingerprintKind, Fingerprint] = field(default_factory=dict)
    similarity: Dict[FingerprintKind, float] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return str(self.metadata.get("Name", self.metadata.get("_Name", "")))


class FeaturizationService:
    """
    Normalizes a molecule and extracts descriptors and fingerprints.

    Holds no per-molecule state, so one instance can process any number of
    molecules, and instances are rebuilt per worker process for batch runs.
    """

    def __init__(
        self,
        settings: Optional[FeaturizationSettings] = None,
        canonicalizer: Optional[Canonicalizer] = None,
        query: Optional[MolecularGraph] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            settings: Run configuration
            canonicalizer: Function producing canonical SMILES for a graph
            query: Reference molecule for similarity, left unmodified
        """
        self.settings = settings or FeaturizationSettings()
        self._canonicalizer = canonicalizer
        self._normalizer = NormalizationService()
        self._descriptors = DescriptorService(self.settings.descriptors)
        self._fingerprints = FingerprintService(
            circular_radius=self.settings.circular_radius,
            circular_length=self.settings.circular_length,
        )
        self._similarity = SimilarityService()
        self._query_fingerprints: Dict[FingerprintKind, Fingerprint] = {}
        if query is not None:
            prepared = self._normalizer.normalize(query.copy())
            self._query_fingerprints = self._fingerprints.calculate_all(
                prepared, self.settings.fingerprints
            )

    def featurize(self, graph: MolecularGraph) -> FeatureRecord:
        """
        Extract all configured features from one molecule.

        The graph is normalized in place. Atom counts and SMILES are taken
        from the graph as given, before hydrogens are made explicit.
        Failures of individual features are collected on the record rather
        than raised.

        Args:
            graph: Raw or normalized molecular graph

        Returns:
            FeatureRecord for the molecule
        """
        record = FeatureRecord(
            metadata=dict(graph.metadata),
            molecular_weight=molecular_weight(graph),
            atom_count=len(graph),
            implicit_hydrogen_count=sum(a.implicit_hydrogens for a in graph.atoms),
        )

        if self._canonicalizer is not None:
            try:
                record.canonical_smiles = self._canonicalizer(graph, isomeric=True)
                record.unique_smiles = self._canonicalizer(graph, isomeric=False)
            except FeaturizationError as e:
                logger.warning("%s: canonical SMILES failed: %s", record.name, e)
                record.failures["canonical_smiles"] = str(e)

        self._normalizer.normalize(graph)
        record.explicit_atom_count = len(graph)
        record.descriptors = self._descriptors.calculate(graph)
        for label, message in record.descriptors.failure_messages().items():
            record.failures[label] = message

        for kind in self.settings.fingerprints:
            try:
                record.fingerprints[kind] = self._fingerprints.calculate(graph, kind)
            except FeaturizationError as e:
                logger.warning("%s: fingerprint %s failed: %s", record.name, kind.label, e)
                record.failures[kind.label] = str(e)

        if self._query_fingerprints:
            record.similarity = self._similarity.compare(
                record.fingerprints, self._query_fingerprints
            )
        return record

    def featurize_all(
        self, graphs: Iterable[MolecularGraph], workers: Optional[int] = None
    ) -> Iterator[FeatureRecord]:
        """
        Featurize a stream of molecules.

        With one worker, each graph is normalized in place as with
        ``featurize``. With more than one, molecules are sent one per task
        to a process pool, where each worker normalizes a pickled copy: the
        caller's graphs stay at the stage they were given in. At most
        ``workers * 2`` molecules are in flight, so the input is pulled
        lazily, and records are yielded in completion order.

        Args:
            graphs: Molecules to process
            workers: Process count, defaults to the configured value

        Yields:
            FeatureRecord per molecule
        """
        workers = workers or self.settings.workers
        if workers <= 1:
            for graph in graphs:
                yield self.featurize(graph)
            return

        pending_graphs = iter(graphs)
        with ProcessPoolExecutor(
            max_workers=workers,
            initializer=_init_worker,
            initargs=(self.settings, self._canonicalizer, self._query_fingerprints),
        ) as executor:
            in_flight = {
                executor.submit(_featurize_in_worker, graph)
                for graph in islice(pending_graphs, workers * 2)
            }
            while in_flight:
                done, in_flight = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    for graph in islice(pending_graphs, 1):
                        in_flight.add(executor.submit(_featurize_in_worker, graph))
                    yield future.result()


_worker_service: Optional[FeaturizationService] = None


def _init_worker(settings, canonicalizer, query_fingerprints) -> None:
    global _worker_service
    _worker_service = FeaturizationService(settings, canonicalizer)
    _worker_service._query_fingerprints = query_fingerprints


def _featurize_in_worker(graph: MolecularGraph) -> FeatureRecord:
    return _worker_service.featurize(graph)
