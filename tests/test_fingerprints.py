import numpy as np
import pytest
from rdkit import Chem

from chemfeat.core.domain.implementations.circular_fingerprinter import (
    CircularFingerprinter,
    stable_hash,
)
from chemfeat.core.domain.implementations.substructure_keys import (
    AROMATIC_RING_BIT,
    CATALOGUE,
    FINGERPRINT_LENGTH,
    ElementCountKey,
    SmartsKey,
    any_aromaticity,
)
from chemfeat.core.domain.models.fingerprint import Fingerprint
from chemfeat.core.errors import PreconditionViolation
from chemfeat.core.services.fingerprint_service import FingerprintKind, FingerprintService
from chemfeat.infrastructure.adapters.rdkit_adapter import RDKitAdapter


@pytest.fixture(scope="module")
def service():
    return FingerprintService()


def test_substructure_key_layout():
    assert FINGERPRINT_LENGTH == 881
    assert len(set(CATALOGUE)) == FINGERPRINT_LENGTH
    assert AROMATIC_RING_BIT == 255


def test_any_aromaticity_rewrites_uppercase_symbols():
    assert any_aromaticity("C-Cl") == "[#6]-[#17]"
    assert any_aromaticity("c1ccccc1") == "c1ccccc1"
    assert any_aromaticity("[O]=C") == "[#8]=[#6]"


def test_aromatic_ring_bit(normalized, service):
    benzene = service.calculate(normalized("c1ccccc1"), FingerprintKind.SUBSTRUCTURE_KEYS)
    cyclohexane = service.calculate(
        normalized("C1CCCCC1"), FingerprintKind.SUBSTRUCTURE_KEYS
    )
    assert benzene.length == 881
    assert AROMATIC_RING_BIT in benzene
    assert AROMATIC_RING_BIT not in cyclohexane


def test_element_count_keys(normalized, service):
    fingerprint = service.calculate(normalized("CCO"), FingerprintKind.SUBSTRUCTURE_KEYS)
    assert CATALOGUE.index(ElementCountKey("C", 2)) in fingerprint
    assert CATALOGUE.index(ElementCountKey("O", 1)) in fingerprint
    assert CATALOGUE.index(ElementCountKey("N", 1)) not in fingerprint
    # six hydrogens once made explicit
    assert CATALOGUE.index(ElementCountKey("H", 4)) in fingerprint
    assert CATALOGUE.index(ElementCountKey("H", 8)) not in fingerprint


def test_smarts_keys_match_any_aromaticity(normalized, service):
    phenol = service.calculate(normalized("Oc1ccccc1"), FingerprintKind.SUBSTRUCTURE_KEYS)
    ethanol = service.calculate(normalized("CCO"), FingerprintKind.SUBSTRUCTURE_KEYS)
    bit = CATALOGUE.index(SmartsKey("C(~O)(:C)"))

    assert bit in phenol
    assert bit not in ethanol


def test_substructure_keys_require_normalized_graph(smiles_graph, service):
    with pytest.raises(PreconditionViolation):
        service.calculate(smiles_graph("c1ccccc1"), FingerprintKind.SUBSTRUCTURE_KEYS)


def test_circular_is_deterministic(smiles_graph, service):
    first = service.calculate(smiles_graph("CC(=O)Nc1ccc(O)cc1"), FingerprintKind.CIRCULAR)
    second = service.calculate(smiles_graph("CC(=O)Nc1ccc(O)cc1"), FingerprintKind.CIRCULAR)
    assert first == second
    assert first.length == 1024
    assert 0 < first.cardinality <= first.length


def test_circular_ignores_atom_order(smiles_graph, service):
    assert service.calculate(smiles_graph("OCC"), FingerprintKind.CIRCULAR) == (
        service.calculate(smiles_graph("CCO"), FingerprintKind.CIRCULAR)
    )


def test_circular_ignores_hydrogen_representation(
    smiles_graph, normalizer, explicit_ethane, implicit_ethane, service
):
    raw = smiles_graph("c1ccncc1")
    explicit = normalizer.normalize(smiles_graph("c1ccncc1"))
    assert service.calculate(raw, FingerprintKind.CIRCULAR) == service.calculate(
        explicit, FingerprintKind.CIRCULAR
    )
    assert service.calculate(explicit_ethane, FingerprintKind.CIRCULAR) == (
        service.calculate(implicit_ethane, FingerprintKind.CIRCULAR)
    )


def test_circular_distinguishes_aromatic_rings(smiles_graph, service):
    benzene = service.calculate(smiles_graph("c1ccccc1"), FingerprintKind.CIRCULAR)
    cyclohexane = service.calculate(smiles_graph("C1CCCCC1"), FingerprintKind.CIRCULAR)
    assert benzene != cyclohexane


def test_circular_does_not_modify_input(smiles_graph):
    graph = smiles_graph("c1ccccc1O")
    before = graph.state()
    CircularFingerprinter().fingerprint(graph)
    assert graph.state() == before


def test_circular_radius_zero_uses_atom_invariants_only(smiles_graph):
    fingerprinter = CircularFingerprinter(radius=0, length=2048)
    # all six carbons share one environment
    assert len(fingerprinter.raw_features(smiles_graph("c1ccccc1"))) == 1


def test_larger_radius_adds_features(smiles_graph):
    graph = smiles_graph("CCCCCCO")
    small = CircularFingerprinter(radius=1).raw_features(graph)
    large = CircularFingerprinter(radius=3).raw_features(graph)
    assert small < large


@pytest.mark.parametrize("radius, length", [(-1, 1024), (2, 0)])
def test_circular_rejects_bad_parameters(radius, length):
    with pytest.raises(ValueError):
        CircularFingerprinter(radius=radius, length=length)


def test_stable_hash_is_32_bit():
    value = stable_hash([6, 0, 2, 1, 1])
    assert value == stable_hash([6, 0, 2, 1, 1])
    assert 0 <= value < 2 ** 32
    assert value != stable_hash([6, 0, 2, 1, 0])


def test_service_lengths():
    service = FingerprintService(circular_radius=2, circular_length=512)
    assert service.length(FingerprintKind.CIRCULAR) == 512
    assert service.length(FingerprintKind.SUBSTRUCTURE_KEYS) == 881


def test_calculate_all(normalized, service):
    fingerprints = service.calculate_all(normalized("c1ccccc1O"))
    assert set(fingerprints) == set(FingerprintKind)


def test_fingerprint_validation():
    with pytest.raises(ValueError):
        Fingerprint.from_indices([0, 8], 8)
    with pytest.raises(ValueError):
        Fingerprint.from_indices([], 0)


def test_fingerprint_dense_form():
    fingerprint = Fingerprint.from_indices([1, 3], 5, "test")
    np.testing.assert_array_equal(fingerprint.to_array(), [0, 1, 0, 1, 0])
    assert Fingerprint.from_array(fingerprint.to_array(), "test") == fingerprint
    assert fingerprint.on_bits() == [1, 3]


def _renumbered(smiles, order):
    mol = Chem.MolFromSmiles(smiles)
    atoms = list(range(mol.GetNumAtoms()))
    if order == "reversed":
        atoms.reverse()
    elif order == "rotated":
        atoms = atoms[3:] + atoms[:3]
    return RDKitAdapter().from_mol(Chem.RenumberAtoms(mol, atoms))


@pytest.mark.parametrize(
    "smiles",
    ["c1ccc2ccccc2c1", "c1ccc2[nH]ccc2c1", "c1ccc2ncccc2c1", "CC(=O)Oc1ccccc1C(=O)O"],
)
@pytest.mark.parametrize("order", ["reversed", "rotated"])
def test_fingerprints_ignore_atom_numbering(normalizer, service, smiles, order):
    original = normalizer.normalize(_renumbered(smiles, "identity"))
    renumbered = normalizer.normalize(_renumbered(smiles, order))

    for kind in FingerprintKind:
        assert service.calculate(renumbered, kind) == service.calculate(original, kind)
