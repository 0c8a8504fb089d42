# src/chemfeat/infrastructure/repositories/structure_repository.py
"""Repository implementation for molecule files."""

import logging
import os
from typing import Any, Dict, Iterator, Optional, Tuple

from rdkit import Chem

from ...core.domain.models.molecular_graph import MolecularGraph
from ...core.errors import ParseError
from ...core.interfaces.repository import Repository
from ..adapters.rdkit_adapter import RDKitAdapter

logger = logging.getLogger(__name__)

Entry = Tuple[MolecularGraph, Dict[str, Any]]

SDF_SUFFIXES = (".sdf", ".sd")
SMILES_SUFFIXES = (".smi", ".smiles")


class StructureRepository(Repository[Entry]):
    """Reads raw molecular graphs with their metadata from an SD or SMILES file."""

    def __init__(
        self,
        path: str,
        skip_on_error: bool = True,
        adapter: Optional[RDKitAdapter] = None,
    ):
        """
        Initialize repository for one input file.

        Args:
            path: SD file (.sdf, .sd) or SMILES file (.smi, .smiles)
            skip_on_error: Log and skip unreadable records instead of raising
            adapter: RDKit conversion adapter

        Raises:
            ParseError: If the file format is not recognised
        """
        self._path = path
        self._skip_on_error = skip_on_error
        self._adapter = adapter or RDKitAdapter()

        suffix = os.path.splitext(path)[1].lower()
        if suffix in SDF_SUFFIXES:
            self._reader = self._read_sdf
        elif suffix in SMILES_SUFFIXES:
            self._reader = self._read_smiles
        else:
            raise ParseError(f"Unsupported structure file format: {path}")

    @property
    def path(self) -> str:
        return self._path

    def __iter__(self) -> Iterator[Entry]:
        for index, (mol, metadata) in enumerate(self._reader()):
            metadata["_Index"] = index
            try:
                if mol is None:
                    raise ParseError(f"Record {index} of {self._path} is unreadable")
                graph = self._adapter.from_mol(mol, metadata)
            except ParseError as e:
                if not self._skip_on_error:
                    raise
                logger.warning("Skipping record %d: %s", index, e)
                continue
            yield graph, metadata

    def get(self, id: str) -> Optional[Entry]:
        """
        Retrieve the first molecule whose name matches.

        Args:
            id: Molecule name (SD title line or SMILES name column)

        Returns:
            (graph, metadata) pair, or None if no molecule has that name
        """
        for graph, metadata in self:
            if metadata.get("_Name") == id:
                return graph, metadata
        return None

    def _read_sdf(self) -> Iterator[Tuple[Optional[Chem.Mol], Dict[str, Any]]]:
        with open(self._path, "rb") as handle:
            for mol in Chem.ForwardSDMolSupplier(handle):
                if mol is None:
                    yield None, {}
                    continue
                metadata = mol.GetPropsAsDict()
                if mol.HasProp("_Name"):
                    metadata["_Name"] = mol.GetProp("_Name")
                yield mol, metadata

    def _read_smiles(self) -> Iterator[Tuple[Optional[Chem.Mol], Dict[str, Any]]]:
        with open(self._path) as handle:
            for line in handle:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                fields = line.split(None, 1)
                metadata: Dict[str, Any] = {"SMILES": fields[0]}
                if len(fields) > 1:
                    metadata["_Name"] = fields[1]
                yield Chem.MolFromSmiles(fields[0]), metadata
