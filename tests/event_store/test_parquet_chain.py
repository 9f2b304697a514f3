#!filepath: tests/event_store/test_parquet_chain.py
import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from dispbdt.event_store.parquet_chain import (
    SHOWERPARS,
    ParquetChain,
    read_input_list,
    tpars_path,
)
from dispbdt.utils.errors import ConfigurationError


def _write(path, values):
    path.parent.mkdir(parents=True, exist_ok=True)
    pq.write_table(pa.table({"v": pa.array(values, pa.int32())}), path)


def test_tpars_path_is_one_based():
    assert tpars_path(0) == "Tel_1/tpars.parquet"
    assert tpars_path(11) == "Tel_12/tpars.parquet"


def test_read_input_list(tmp_path):
    f = tmp_path / "in.list"
    f.write_text("/a\n\n/b\n", encoding="utf-8")

    sources = read_input_list(f)

    assert [str(s) for s in sources] == ["/a", "/b"]


def test_read_input_list_missing(tmp_path):
    with pytest.raises(ConfigurationError):
        read_input_list(tmp_path / "missing.list")


def test_read_input_list_empty(tmp_path):
    f = tmp_path / "in.list"
    f.write_text("\n\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        read_input_list(f)


def test_chain_concatenates_in_list_order(tmp_path):
    _write(tmp_path / "s1" / SHOWERPARS, [1, 2, 3])
    _write(tmp_path / "s2" / SHOWERPARS, [4, 5])

    chain = ParquetChain([tmp_path / "s1", tmp_path / "s2"], SHOWERPARS, batch_size=2)

    assert chain.num_entries == 5
    assert [row["v"] for row in chain] == [1, 2, 3, 4, 5]


def test_chain_missing_file_contributes_zero_entries(tmp_path):
    _write(tmp_path / "s1" / SHOWERPARS, [1, 2])
    (tmp_path / "s2").mkdir()

    with ParquetChain([tmp_path / "s2", tmp_path / "s1"], SHOWERPARS) as chain:
        assert chain.num_entries == 2
        assert [row["v"] for row in chain] == [1, 2]


def test_chain_column_projection(tmp_path):
    path = tmp_path / "s1" / SHOWERPARS
    path.parent.mkdir()
    pq.write_table(pa.table({"a": [1, 2], "b": [3.0, 4.0]}), path)

    rows = list(ParquetChain([tmp_path / "s1"], SHOWERPARS, columns=["b"]))

    assert rows == [{"b": 3.0}, {"b": 4.0}]


def test_read_table_without_files(tmp_path):
    with pytest.raises(ConfigurationError):
        ParquetChain([tmp_path], SHOWERPARS).read_table()


def test_close_stops_iteration(tmp_path):
    _write(tmp_path / "s1" / SHOWERPARS, [1, 2, 3])

    chain = ParquetChain([tmp_path / "s1"], SHOWERPARS, batch_size=1)
    it = iter(chain)
    assert next(it)["v"] == 1

    chain.close()
    assert next(it, None) is None


def test_module_documents_source_layout():
    from dispbdt.event_store import parquet_chain

    assert "Tel_<n>/tpars.parquet" in parquet_chain.__doc__
