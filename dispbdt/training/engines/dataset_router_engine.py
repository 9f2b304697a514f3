# dispbdt/training/engines/dataset_router_engine.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import pyarrow as pa
import pyarrow.parquet as pq

from dispbdt import logs
from dispbdt.training.schema import DISP_TREE_SCHEMA
from dispbdt.training.target import TargetLabel
from dispbdt.utils.filesystem import FileSystem
from dispbdt.utils.parquet_utils import ParquetAtomicWriter
from dispbdt.utils.path import PathManager


class DispDataset:
    """
    DispDataset (one telescope type)

    Lifecycle:
      - created on the first record of its telescope type
      - grows by append() during assembly
      - frozen by to_table(); no append afterwards
    """

    def __init__(self, tel_type: int, schema: pa.Schema = DISP_TREE_SCHEMA):
        self.tel_type = tel_type
        self.schema = schema
        self._rows: List[Dict[str, Any]] = []
        self._table: Optional[pa.Table] = None

    @classmethod
    def from_table(cls, tel_type: int, table: pa.Table) -> "DispDataset":
        dataset = cls(tel_type)
        dataset._table = table.select(DISP_TREE_SCHEMA.names).cast(DISP_TREE_SCHEMA)
        return dataset

    @property
    def name(self) -> str:
        return f"dispTree_{self.tel_type}"

    def append(self, record: Mapping[str, Any]) -> None:
        if self._table is not None:
            raise RuntimeError(f"[DispDataset] {self.name} is frozen")
        self._rows.append(dict(record))

    def to_table(self) -> pa.Table:
        if self._table is None:
            self._table = pa.Table.from_pylist(self._rows, schema=self.schema)
            self._rows = []
        return self._table

    def __len__(self) -> int:
        if self._table is not None:
            return self._table.num_rows
        return len(self._rows)


class DatasetCollection:
    """
    Keyed collection: telescope type -> DispDataset.
    Owned by the TrainingContext; iteration is in ascending type order.
    """

    def __init__(self):
        self._datasets: Dict[int, DispDataset] = {}

    def get_or_create(self, tel_type: int) -> DispDataset:
        dataset = self._datasets.get(tel_type)
        if dataset is None:
            dataset = DispDataset(tel_type)
            self._datasets[tel_type] = dataset
            logs.info(f"[DatasetRouter] new training tree {dataset.name}")
        return dataset

    def replace(self, datasets: Mapping[int, DispDataset]) -> None:
        self._datasets = dict(datasets)

    def get(self, tel_type: int) -> Optional[DispDataset]:
        return self._datasets.get(tel_type)

    @property
    def tel_types(self) -> List[int]:
        return sorted(self._datasets)

    def items(self) -> Iterator[Tuple[int, DispDataset]]:
        for tel_type in self.tel_types:
            yield tel_type, self._datasets[tel_type]

    def __len__(self) -> int:
        return len(self._datasets)


class DatasetRouter:
    """
    DatasetRouter

    Responsibility:
      - route derived records into the dataset of their telescope type
      - persist the aggregate dataset (one parquet per telescope type)
      - reload a previously persisted aggregate dataset

    Exactly one of (route during assembly) / (load_existing) per run.
    """

    def __init__(self, collection: DatasetCollection):
        self.collection = collection

    # ------------------------------------------------------------------
    def route(self, record: Mapping[str, Any], tel_type: int) -> None:
        self.collection.get_or_create(tel_type).append(record)

    # ------------------------------------------------------------------
    def write(
        self,
        pm: PathManager,
        target: TargetLabel,
        tel_type_filter: int,
    ) -> List[Path]:
        out_dir = FileSystem.ensure_dir(pm.dataset_dir(target.file_stem, tel_type_filter))

        written: List[Path] = []
        for tel_type, dataset in self.collection.items():
            table = dataset.to_table()
            path = pm.dataset_file(target.file_stem, tel_type_filter, tel_type)

            ParquetAtomicWriter.write_table(table, path)
            written.append(path)

            logs.info(
                f"[DatasetRouter] writing training tree for telescope type {tel_type} "
                f"with {table.num_rows} entries -> {path.name} "
                f"({FileSystem.format_size(FileSystem.get_file_size(path))})"
            )

        logs.info(f"[DatasetRouter] aggregate dataset: {out_dir}")
        return written

    # ------------------------------------------------------------------
    def load_existing(
        self,
        target: TargetLabel,
        tel_type_filter: int,
        directory: Path,
    ) -> bool:
        """
        Replace the collection by datasets persisted under `directory`.

        - tel_type_filter != 0 : only dispTree_<filter>
        - tel_type_filter == 0 : every dispTree_* of the aggregate dataset

        Returns False (logged) when nothing could be loaded.
        """
        pm = PathManager(directory)
        dataset_dir = pm.dataset_dir(target.file_stem, tel_type_filter)

        if tel_type_filter != 0:
            candidates = [pm.dataset_file(target.file_stem, tel_type_filter, tel_type_filter)]
        else:
            candidates = [
                f for f in FileSystem.scan_dir(dataset_dir, ".parquet")
                if f.name.startswith(PathManager.TREE_PREFIX)
            ]

        loaded: Dict[int, DispDataset] = {}
        for path in candidates:
            if not path.exists():
                logs.error(f"[DatasetRouter] error reading training trees from {path}")
                continue

            try:
                tel_type = PathManager.tel_type_from_tree_file(path)
                table = pq.read_table(path)
                loaded[tel_type] = DispDataset.from_table(tel_type, table)
            except (OSError, ValueError, KeyError, pa.ArrowException) as e:
                logs.error(f"[DatasetRouter] error reading training trees from {path}: {e}")
                continue

            logs.info(
                f"[DatasetRouter] loaded {path.name} with {len(loaded[tel_type])} entries"
            )

        if not loaded:
            logs.error(f"[DatasetRouter] no training trees found in {dataset_dir}")
            return False

        self.collection.replace(loaded)
        return True
