#!filepath: tests/training/engines/test_array_config_engine.py
import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from conftest import LST, MST, telescope
from dispbdt.event_store.parquet_chain import read_input_list
from dispbdt.training.engines.array_config_engine import (
    ArrayConfigEngine,
    ArrayConfiguration,
)
from dispbdt.utils.errors import ConfigurationError


@pytest.fixture
def source(write_event_store):
    input_list = write_event_store(
        [
            telescope(LST, 1, x=10.0, y=20.0, z=2.0),
            telescope(MST, 5),
            telescope(MST, 7),
        ],
        n_events=3,
    )
    return read_input_list(input_list)[0]


def test_load_without_array_list(source):
    config = ArrayConfigEngine().load(source)

    assert config.n_tel == 3
    assert config.active == (True, True, True)
    assert [t.hyper_array_id for t in config.telescopes] == [1, 5, 7]
    assert config.telescopes[0].x == pytest.approx(10.0)
    assert config.telescopes[0].tel_type == LST
    assert config.tel_types() == sorted([LST, MST])


def test_array_list_selects_by_hyper_array_id(source, tmp_path):
    array_list = tmp_path / "array.list"
    array_list.write_text("7\n\n7\n99\n", encoding="utf-8")

    config = ArrayConfigEngine().load(source, array_list)

    assert config.active == (False, False, True)
    assert config.selected(0) == [2]
    assert config.tel_types(0) == [MST]


def test_type_filter(source):
    config = ArrayConfigEngine().load(source)

    assert config.selected(MST) == [1, 2]
    assert config.selected(LST) == [0]
    assert config.selected(12345) == []


def test_missing_array_list_is_fatal(source, tmp_path):
    with pytest.raises(ConfigurationError):
        ArrayConfigEngine().load(source, tmp_path / "missing.list")


def test_unparseable_array_list_line(source, tmp_path):
    array_list = tmp_path / "array.list"
    array_list.write_text("5\nabc\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ArrayConfigEngine().load(source, array_list)


def test_no_array_list_keeps_all_active():
    mask = ArrayConfigEngine.read_array_list(2, None, [1, 2])
    assert mask == [True, True]


def test_mask_length_mismatch(source):
    config = ArrayConfigEngine().load(source)

    with pytest.raises(ConfigurationError):
        ArrayConfiguration(telescopes=config.telescopes, active=(True,))


def test_zero_telescopes_is_fatal(tmp_path):
    src = tmp_path / "empty_source"
    src.mkdir()
    pq.write_table(
        pa.table({c: pa.array([], pa.float64()) for c in
                  ["TelID_hyperArray", "TelType", "TelX", "TelY", "TelZ"]}),
        src / "telconfig.parquet",
    )

    with pytest.raises(ConfigurationError):
        ArrayConfigEngine().load(src)
