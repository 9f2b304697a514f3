#!filepath: tests/base_test/test_path_manager.py
import pytest

from dispbdt.utils.path import PathManager


def test_dataset_dir_with_and_without_filter(tmp_path):
    pm = PathManager(tmp_path)

    assert pm.dataset_dir("BDTDisp", 0) == tmp_path.resolve() / "BDTDisp"
    assert pm.dataset_dir("BDTDisp", 10408618) == tmp_path.resolve() / "BDTDisp_10408618"


def test_dataset_file(tmp_path):
    pm = PathManager(tmp_path)

    f = pm.dataset_file("BDTDispEnergy", 0, 138704810)

    assert f == tmp_path.resolve() / "BDTDispEnergy" / "dispTree_138704810.parquet"


def test_model_dir_does_not_collide_with_dataset_dir(tmp_path):
    pm = PathManager(tmp_path)

    assert pm.model_dir("BDTDisp", 5) == tmp_path.resolve() / "BDTDisp_5.model"
    assert pm.model_dir("BDTDisp", 5) != pm.dataset_dir("BDTDisp", 5)


def test_tel_type_from_tree_file(tmp_path):
    assert PathManager.tel_type_from_tree_file(tmp_path / "dispTree_201511619.parquet") == 201511619


@pytest.mark.parametrize("name", ["tree_1.parquet", "dispTree_x.parquet"])
def test_tel_type_from_tree_file_rejects(tmp_path, name):
    with pytest.raises(ValueError):
        PathManager.tel_type_from_tree_file(tmp_path / name)
