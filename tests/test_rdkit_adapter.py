import pytest

from chemfeat.core.domain.models.bond import BondOrder
from chemfeat.core.domain.models.molecular_graph import MolecularGraph
from chemfeat.core.errors import ParseError
from chemfeat.infrastructure.adapters.rdkit_adapter import (
    RDKitAdapter,
    canonicalize,
    parse_smiles,
)


def test_parse_smiles_kekulizes():
    graph = parse_smiles("c1ccccc1", {"_Name": "benzene"})

    assert len(graph) == 6
    assert graph.metadata == {"_Name": "benzene"}
    assert all(atom.implicit_hydrogens == 1 for atom in graph.atoms)
    assert all(atom.aromatic is None for atom in graph.atoms)
    orders = sorted(int(bond.order) for bond in graph.bonds)
    assert orders == [1, 1, 1, 2, 2, 2]


def test_parse_smiles_keeps_charges():
    graph = parse_smiles("C[N+](=O)[O-]")
    assert sorted(atom.charge for atom in graph.atoms) == [-1, 0, 0, 1]


def test_invalid_smiles():
    with pytest.raises(ParseError):
        parse_smiles("C1CC(")


@pytest.mark.parametrize(
    "first, second",
    [("OCC", "CCO"), ("C1=CC=CC=C1", "c1ccccc1"), ("N1C=CC=C1", "c1cc[nH]c1")],
)
def test_canonical_smiles_agree(first, second):
    assert canonicalize(parse_smiles(first)) == canonicalize(parse_smiles(second))


def test_canonical_smiles_unchanged_by_normalization(normalized):
    for smiles in ("c1ccccc1O", "CC(=O)N", "C[N+](=O)[O-]"):
        assert canonicalize(normalized(smiles)) == canonicalize(parse_smiles(smiles))


def test_canonical_smiles_of_hand_built_graph(explicit_ethane):
    assert canonicalize(explicit_ethane) == "CC"


def test_canonical_smiles_of_benzene():
    assert canonicalize(parse_smiles("C1=CC=CC=C1")) == "c1ccccc1"


def test_invalid_valence_is_a_parse_error():
    graph = MolecularGraph()
    graph.add_atom("O")
    for _ in range(3):
        carbon = graph.add_atom("C", implicit_hydrogens=3)
        graph.add_bond(0, carbon.index, BondOrder.SINGLE)
    with pytest.raises(ParseError):
        RDKitAdapter().canonicalize(graph)


@pytest.mark.parametrize("smiles", ["CC(=O)Oc1ccccc1C(=O)O", "C[N+](=O)[O-]", "c1ccc2ccccc2c1"])
def test_canonical_round_trip(smiles):
    first = canonicalize(parse_smiles(smiles))
    assert canonicalize(parse_smiles(first)) == first


def test_isotopes_are_kept():
    graph = parse_smiles("[2H]C")
    assert sorted(atom.isotope for atom in graph.atoms) == [0, 2]
    assert canonicalize(graph) != canonicalize(parse_smiles("C"))
    assert "[2H]" not in canonicalize(graph, isomeric=False)


def test_tetrahedral_stereo_is_kept():
    first = parse_smiles("C[C@H](N)O")
    second = parse_smiles("C[C@@H](N)O")

    assert first.atoms[1].chirality in ("CW", "CCW")
    assert canonicalize(first) != canonicalize(second)
    assert canonicalize(first, isomeric=False) == canonicalize(second, isomeric=False)


@pytest.mark.parametrize("smiles", ["C[C@H](N)O", "N[C@@H](C)C(=O)O", "[13CH3]C(=O)O"])
def test_isomeric_smiles_survive_normalization(normalized, smiles):
    expected = canonicalize(parse_smiles(smiles))
    assert canonicalize(parse_smiles(expected)) == expected
    assert canonicalize(normalized(smiles)) == expected
