import pytest
from rdkit import Chem

from chemfeat.core.domain.models.normalization_stage import NormalizationStage
from chemfeat.core.errors import ParseError
from chemfeat.infrastructure.repositories.structure_repository import StructureRepository


@pytest.fixture
def smiles_file(tmp_path):
    path = tmp_path / "molecules.smi"
    path.write_text(
        "# test set\n"
        "CCO ethanol\n"
        "C1CC( broken\n"
        "\n"
        "c1ccccc1 benzene\n"
    )
    return path


@pytest.fixture
def sd_file(tmp_path):
    path = tmp_path / "molecules.sdf"
    writer = Chem.SDWriter(str(path))
    for smiles, name, identifier in (("CCO", "ethanol", "7"), ("c1ccncc1", "pyridine", "8")):
        mol = Chem.MolFromSmiles(smiles)
        mol.SetProp("_Name", name)
        mol.SetProp("ID", identifier)
        writer.write(mol)
    writer.close()
    return path


def test_smiles_file_skips_bad_records(smiles_file):
    entries = list(StructureRepository(str(smiles_file)))

    assert [metadata["_Name"] for _, metadata in entries] == ["ethanol", "benzene"]
    graph, metadata = entries[1]
    assert graph.stage is NormalizationStage.RAW
    assert graph.metadata["_Name"] == "benzene"
    assert metadata["SMILES"] == "c1ccccc1"
    assert metadata["_Index"] == 2


def test_smiles_file_strict_mode(smiles_file):
    repository = StructureRepository(str(smiles_file), skip_on_error=False)
    with pytest.raises(ParseError):
        list(repository)


def test_sd_file(sd_file):
    repository = StructureRepository(str(sd_file))
    entries = repository.list()

    assert len(entries) == 2
    graph, metadata = entries[1]
    assert metadata["_Name"] == "pyridine"
    assert str(metadata["ID"]) == "8"
    assert sorted(atom.element for atom in graph.atoms) == ["C"] * 5 + ["N"]


def test_iteration_is_restartable(sd_file):
    repository = StructureRepository(str(sd_file))
    assert len(list(repository)) == len(list(repository)) == 2


def test_get_by_name(sd_file):
    repository = StructureRepository(str(sd_file))
    graph, metadata = repository.get("ethanol")
    assert len(graph) == 3
    assert repository.get("missing") is None


def test_unsupported_format(tmp_path):
    with pytest.raises(ParseError):
        StructureRepository(str(tmp_path / "molecules.pdb"))
