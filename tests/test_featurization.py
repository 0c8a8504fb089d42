import pytest

from chemfeat.core.config import FeaturizationSettings
from chemfeat.core.domain.models.normalization_stage import NormalizationStage
from chemfeat.core.services.descriptor_service import DescriptorKind
from chemfeat.core.services.featurization_service import FeaturizationService
from chemfeat.core.services.fingerprint_service import FingerprintKind
from chemfeat.infrastructure.adapters.rdkit_adapter import canonicalize


@pytest.fixture
def service():
    return FeaturizationService(canonicalizer=canonicalize)


def test_featurize_single_molecule(service, smiles_graph):
    graph = smiles_graph("C1=CC=CC=C1", name="benzene")
    record = service.featurize(graph)

    assert record.name == "benzene"
    assert record.canonical_smiles == "c1ccccc1"
    assert record.failures == {}
    assert record.descriptors["LipinskiFailures"] == 0
    assert record.descriptors["Zagreb"] == pytest.approx(6 * 9 + 6 * 1)
    assert set(record.fingerprints) == set(FingerprintKind)
    assert record.similarity == {}
    assert graph.stage is NormalizationStage.AROMATICITY_APPLIED


def test_failures_are_collected(service, smiles_graph):
    record = service.featurize(smiles_graph("C[SiH3]", name="methylsilane"))

    assert "ALogP" in record.failures
    assert "Zagreb" in record.descriptors
    assert set(record.fingerprints) == set(FingerprintKind)


def test_similarity_to_query(smiles_graph):
    service = FeaturizationService(
        canonicalizer=canonicalize, query=smiles_graph("c1ccccc1O")
    )
    same = service.featurize(smiles_graph("Oc1ccccc1"))
    other = service.featurize(smiles_graph("CCCCCC"))

    assert same.similarity == {kind: 1.0 for kind in FingerprintKind}
    for kind in FingerprintKind:
        assert other.similarity[kind] < 1.0


def test_query_is_not_modified(smiles_graph):
    query = smiles_graph("c1ccccc1O")
    before = query.state()
    FeaturizationService(query=query)
    assert query.state() == before


def test_settings_select_features(smiles_graph):
    settings = FeaturizationSettings(
        descriptors=(DescriptorKind.PETITJEAN,),
        fingerprints=(FingerprintKind.CIRCULAR,),
        circular_length=256,
    )
    record = FeaturizationService(settings).featurize(smiles_graph("CCC"))

    assert record.canonical_smiles is None
    assert record.descriptors.values == {"PetitjeanNumber": 0.5}
    assert list(record.fingerprints) == [FingerprintKind.CIRCULAR]
    assert record.fingerprints[FingerprintKind.CIRCULAR].length == 256


def test_featurize_all_sequential(service, smiles_graph):
    graphs = [smiles_graph(s, name=s) for s in ("C", "CC", "CCO")]
    records = list(service.featurize_all(graphs))
    assert [r.name for r in records] == ["C", "CC", "CCO"]


def test_featurize_all_in_worker_processes(smiles_graph):
    settings = FeaturizationSettings(workers=2)
    service = FeaturizationService(settings, canonicalize, smiles_graph("CCO"))
    graphs = [smiles_graph(s, name=s) for s in ("CCO", "c1ccccc1", "CC(=O)O")]

    records = {r.name: r for r in service.featurize_all(graphs)}

    assert set(records) == {"CCO", "c1ccccc1", "CC(=O)O"}
    assert records["c1ccccc1"].canonical_smiles == "c1ccccc1"
    assert records["CCO"].similarity[FingerprintKind.CIRCULAR] == 1.0


@pytest.mark.parametrize(
    "kwargs",
    [{"circular_radius": -1}, {"circular_length": 0}, {"workers": 0}],
)
def test_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        FeaturizationSettings(**kwargs)


def test_settings_to_dict():
    data = FeaturizationSettings(query_smiles="CCO").to_dict()
    assert data["circular_radius"] == 3
    assert data["fingerprints"] == ["SUBSTRUCTURE_KEYS", "CIRCULAR"]
    assert data["descriptors"][0] == "ZAGREB"
    assert data["query_smiles"] == "CCO"


def test_record_counts_before_normalization(service, smiles_graph):
    record = service.featurize(smiles_graph("c1ccccc1", name="benzene"))

    assert record.atom_count == 6
    assert record.implicit_hydrogen_count == 6
    assert record.explicit_atom_count == 12
    assert record.molecular_weight == pytest.approx(78.11, abs=1e-2)


def test_unique_and_absolute_smiles(service, smiles_graph):
    record = service.featurize(smiles_graph("C[C@H](N)O"))

    assert "@" in record.canonical_smiles
    assert "@" not in record.unique_smiles
    assert record.unique_smiles == canonicalize(smiles_graph("CC(N)O"), isomeric=False)


def test_featurize_all_pulls_input_lazily(smiles_graph):
    service = FeaturizationService(FeaturizationSettings(workers=2))
    pulled = []

    def stream():
        for i in range(50):
            pulled.append(i)
            yield smiles_graph("C" * (i % 5 + 1), name=str(i))

    records = service.featurize_all(stream())
    first = next(records)
    assert len(pulled) <= 2 * 2 + 1

    rest = list(records)
    assert len(pulled) == 50
    assert {r.name for r in rest} | {first.name} == {str(i) for i in range(50)}


def test_worker_processes_leave_input_raw(smiles_graph):
    service = FeaturizationService(FeaturizationSettings(workers=2))
    graphs = [smiles_graph(s) for s in ("CCO", "c1ccccc1")]

    records = list(service.featurize_all(graphs))

    assert len(records) == 2
    assert all(graph.stage is NormalizationStage.RAW for graph in graphs)
    assert {r.explicit_atom_count for r in records} == {9, 12}
