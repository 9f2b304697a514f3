# dispbdt/utils/parquet_utils.py
from pathlib import Path
import os
import pyarrow.parquet as pq
import pyarrow as pa

from dispbdt.utils.filesystem import FileSystem


class ParquetAtomicWriter:
    """
    Atomic parquet writer

    Semantics:
      - always write to *.tmp first
      - rename to the final parquet on success
    """

    @staticmethod
    def write_table(table: pa.Table, output_path: Path, **kwargs) -> None:
        output_path = Path(output_path)
        FileSystem.ensure_dir(output_path.parent)

        tmp_path = output_path.with_suffix(output_path.suffix + ".tmp")

        kwargs.setdefault("compression", "zstd")
        pq.write_table(table, tmp_path, **kwargs)

        with open(tmp_path, "rb") as f:
            os.fsync(f.fileno())

        tmp_path.replace(output_path)
