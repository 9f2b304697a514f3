#!filepath: dispbdt/event_store/parquet_chain.py
"""
Event store access.
Low-level I/O only: no selection, no derived quantities.

Source layout (one directory per line of the input list):

    <source>/telconfig.parquet
    <source>/showerpars.parquet
    <source>/Tel_<n>/tpars.parquet      n = 1-based telescope ordinal
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence

import pyarrow as pa
import pyarrow.parquet as pq

from dispbdt import logs
from dispbdt.utils.errors import ConfigurationError
from dispbdt.utils.filesystem import FileSystem


TELCONFIG = "telconfig.parquet"
SHOWERPARS = "showerpars.parquet"


def tpars_path(ordinal: int) -> str:
    """
    Relative path of the image-parameter stream of telescope `ordinal` (0-based).
    """
    return f"Tel_{ordinal + 1}/tpars.parquet"


def read_input_list(path: Path | str) -> List[Path]:
    """
    Newline-delimited list of source directories (blank lines skipped).
    """
    try:
        lines = FileSystem.read_lines(path)
    except OSError as e:
        raise ConfigurationError(f"error reading list of input files: {path} ({e})") from e

    if not lines:
        raise ConfigurationError(f"input file list is empty: {path}")

    logs.info(f"[EventStore] input file list {path}: {len(lines)} source(s)")
    return [Path(line) for line in lines]


class ParquetChain:
    """
    ParquetChain

    Responsibility:
      - concatenate ONE relative parquet path across all sources (list order)
      - expose the total entry count from parquet footers (no data read)
      - stream entries sequentially as dict rows, batch by batch

    Contract:
      - entry n of the chain == row (n - rows of previous files) of the file holding it
      - a source without the file contributes zero entries (warning, not an error)
      - iteration is single pass; close() releases the open file
    """

    def __init__(
        self,
        sources: Sequence[Path],
        relative: str,
        *,
        batch_size: int = 65536,
        columns: Optional[List[str]] = None,
    ):
        self.relative = relative
        self.batch_size = batch_size
        self.columns = columns

        self.files: List[Path] = []
        for source in sources:
            f = Path(source) / relative
            if f.exists():
                self.files.append(f)
            else:
                logs.warning(f"[EventStore] {relative} missing in {source} -> 0 entries")

        self._num_entries: Optional[int] = None
        self._active: Optional[Iterator[Dict[str, Any]]] = None

    # --------------------------------------------------
    @property
    def num_entries(self) -> int:
        if self._num_entries is None:
            total = 0
            for f in self.files:
                total += pq.ParquetFile(f).metadata.num_rows
            self._num_entries = total
        return self._num_entries

    # --------------------------------------------------
    def __iter__(self) -> Iterator[Dict[str, Any]]:
        self._active = self._iter_rows()
        return self._active

    def _iter_rows(self) -> Iterator[Dict[str, Any]]:
        for f in self.files:
            with open(f, "rb") as fh:
                parquet_file = pq.ParquetFile(fh)
                for batch in parquet_file.iter_batches(
                    batch_size=self.batch_size,
                    columns=self.columns,
                ):
                    yield from batch.to_pylist()

    # --------------------------------------------------
    def read_table(self) -> pa.Table:
        """
        Materialize the whole chain (small tables only, e.g. telconfig).
        """
        tables = [pq.read_table(f, columns=self.columns) for f in self.files]
        if not tables:
            raise ConfigurationError(f"no {self.relative} found in any source")
        return pa.concat_tables(tables)

    # --------------------------------------------------
    def close(self) -> None:
        if self._active is not None:
            self._active.close()
            self._active = None

    def __enter__(self) -> "ParquetChain":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
