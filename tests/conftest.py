"""Shared fixtures for chemfeat tests."""

import pytest

from chemfeat.core.domain.models.bond import BondOrder
from chemfeat.core.domain.models.molecular_graph import MolecularGraph
from chemfeat.core.services.normalization_service import NormalizationService
from chemfeat.infrastructure.adapters.rdkit_adapter import parse_smiles


@pytest.fixture
def normalizer():
    return NormalizationService()


@pytest.fixture
def smiles_graph():
    """Factory building a raw graph from SMILES."""

    def build(smiles, name=None):
        metadata = {"_Name": name} if name else None
        return parse_smiles(smiles, metadata)

    return build


@pytest.fixture
def normalized(smiles_graph, normalizer):
    """Factory building a fully normalized graph from SMILES."""

    def build(smiles):
        return normalizer.normalize(smiles_graph(smiles))

    return build


@pytest.fixture
def explicit_ethane():
    """Ethane built atom by atom with all hydrogens as atoms."""
    graph = MolecularGraph()
    graph.add_atom("C")
    graph.add_atom("C")
    graph.add_bond(0, 1)
    for carbon in (0, 1):
        for _ in range(3):
            hydrogen = graph.add_atom("H")
            graph.add_bond(carbon, hydrogen.index, BondOrder.SINGLE)
    return graph


@pytest.fixture
def implicit_ethane():
    """Ethane with hydrogens held as counts."""
    graph = MolecularGraph()
    graph.add_atom("C", implicit_hydrogens=3)
    graph.add_atom("C", implicit_hydrogens=3)
    graph.add_bond(0, 1)
    return graph
