import pytest

from chemfeat.core.domain.implementations.ghose_crippen import (
    CONTRIBUTIONS,
    classify_atom,
)
from chemfeat.core.services.descriptor_service import (
    DescriptorKind,
    DescriptorService,
    hydrogen_bond_acceptors,
    hydrogen_bond_donors,
    molecular_weight,
)
from chemfeat.core.errors import PreconditionViolation, UnsupportedAtomError


@pytest.fixture
def service():
    return DescriptorService()


def test_zagreb_counts_hydrogens(explicit_ethane, normalizer, service):
    normalizer.make_hydrogens_explicit(explicit_ethane)
    result = service.calculate(explicit_ethane, [DescriptorKind.ZAGREB])
    # two carbons of degree 4, six hydrogens of degree 1
    assert result["Zagreb"] == 38.0


def test_zagreb_requires_explicit_hydrogens(implicit_ethane, service):
    with pytest.raises(PreconditionViolation):
        service.calculate(implicit_ethane, [DescriptorKind.ZAGREB])


def test_full_set_requires_normalized_graph(smiles_graph, service):
    with pytest.raises(PreconditionViolation):
        service.calculate(smiles_graph("CCO"))


@pytest.mark.parametrize(
    "smiles, expected",
    [("C", 0.0), ("CC", 0.0), ("CCC", 0.5), ("c1ccccc1", 0.0)],
)
def test_petitjean_number(smiles_graph, service, smiles, expected):
    result = service.calculate(smiles_graph(smiles), [DescriptorKind.PETITJEAN])
    assert result["PetitjeanNumber"] == pytest.approx(expected)
    assert result.ok


def test_petitjean_ignores_hydrogens(normalized, service):
    result = service.calculate(normalized("CCC"), [DescriptorKind.PETITJEAN])
    assert result["PetitjeanNumber"] == pytest.approx(0.5)


def test_alogp_of_benzene(normalized, service):
    graph = normalized("c1ccccc1")
    assert {classify_atom(graph, a.index) for a in graph.atoms} == {24, 46}

    result = service.calculate(graph, [DescriptorKind.ALOGP])
    logp = 6 * CONTRIBUTIONS[24][0] + 6 * CONTRIBUTIONS[46][0]
    mr = 6 * CONTRIBUTIONS[24][1] + 6 * CONTRIBUTIONS[46][1]
    assert result["ALogP"] == pytest.approx(logp)
    assert result["ALogp2"] == pytest.approx(logp * logp)
    assert result["AMR"] == pytest.approx(mr)


def test_alogp_of_ethane(normalized, service):
    result = service.calculate(normalized("CC"), [DescriptorKind.ALOGP])
    logp = 2 * CONTRIBUTIONS[1][0] + 6 * CONTRIBUTIONS[46][0]
    assert result["ALogP"] == pytest.approx(logp)


def test_rule_of_five_for_small_molecules(normalized, service):
    for smiles in ("c1ccccc1", "CC(=O)Oc1ccccc1C(=O)O"):
        result = service.calculate(normalized(smiles), [DescriptorKind.RULE_OF_FIVE])
        assert result["LipinskiFailures"] == 0


def test_rule_of_five_counts_violations(normalized, service):
    # C40 alkane: weight above 500 and LogP above 5
    result = service.calculate(normalized("C" * 40), [DescriptorKind.RULE_OF_FIVE])
    assert result["LipinskiFailures"] == 2


def test_lipinski_components(normalized):
    graph = normalized("OCCN")
    assert hydrogen_bond_donors(graph) == 2
    assert hydrogen_bond_acceptors(graph) == 2
    assert molecular_weight(normalized("O")) == pytest.approx(18.015, abs=1e-2)


def test_amide_nitrogen_is_not_an_acceptor(normalized):
    assert hydrogen_bond_acceptors(normalized("CC(N)=O")) == 1


def test_unsupported_element_fails_per_descriptor(normalized, service):
    result = service.calculate(normalized("C[SiH3]"))

    assert not result.ok
    assert set(result.failures) == {"ALogP", "ALogp2", "AMR", "LipinskiFailures"}
    assert all(isinstance(e, UnsupportedAtomError) for e in result.failures.values())
    assert "Zagreb" in result
    assert "PetitjeanNumber" in result
    assert "UnsupportedAtomError" in result.failure_messages()["ALogP"]


def test_calculate_leaves_graph_untouched(normalized, service):
    graph = normalized("CC(=O)O")
    before = graph.state()
    service.calculate(graph)
    assert graph.state() == before


def test_descriptor_kinds_declare_labels():
    labels = [label for kind in DescriptorKind for label in kind.labels]
    assert labels == ["Zagreb", "PetitjeanNumber", "LipinskiFailures", "ALogP", "ALogp2", "AMR"]


@pytest.mark.parametrize(
    "smiles, expected",
    [
        ("COC(C)=O", {1: 60, 4: 58}),  # ester
        ("COOC", {1: 63, 2: 63}),  # peroxide
        ("COC", {1: 59}),  # aliphatic ether
        ("Oc1ccccc1", {0: 57}),  # phenol
        ("OP(O)(O)=O", {1: 117}),  # phosphate
        ("CP(C)(C)=O", {1: 116}),  # phosphine oxide
        ("CP(C)C", {1: 119}),  # phosphine
        ("COP(OC)OC", {2: 118}),  # phosphite
        ("CP(=O)(O)O", {1: 120}),  # phosphonate
        ("CP(C)(C)=C", {1: 115}),  # ylid
    ],
)
def test_functional_group_categories(normalized, smiles, expected):
    graph = normalized(smiles)
    for atom_id, category in expected.items():
        assert classify_atom(graph, atom_id) == category
        assert category in CONTRIBUTIONS


def test_phosphorus_compounds_have_alogp(normalized, service):
    for smiles in ("CP(C)C", "COP(OC)OC"):
        result = service.calculate(normalized(smiles), [DescriptorKind.ALOGP])
        assert result.ok


def test_isotope_mass_in_molecular_weight(normalized):
    heavy_water = molecular_weight(normalized("[2H]O[2H]"))
    assert heavy_water == pytest.approx(20.03, abs=1e-2)
