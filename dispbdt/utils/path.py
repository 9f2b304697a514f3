#!filepath: dispbdt/utils/path.py
from pathlib import Path

from dispbdt import logs


class PathManager:
    """
    Output layout of one training run:

    <output_dir>
     ├── <stem>[_<tel_type>]/            aggregate training dataset
     │     ├── dispTree_<type A>.parquet
     │     └── dispTree_<type B>.parquet
     └── <stem>_<type>.model/            one per telescope type
           ├── model.joblib
           ├── artifact.json
           └── report.json / report.png

    stem = file stem of the target label (BDTDisp, BDTDispError, ...)
    tel_type = telescope type filter of the run (omitted when 0 = all)
    """

    TREE_PREFIX = "dispTree_"

    def __init__(self, output_dir: Path | str):
        self._output_dir = Path(output_dir).resolve()
        logs.debug(f"[PathManager] output_dir = {self._output_dir}")

    # ---------------------------------------------------------
    # Top-level dirs
    # ---------------------------------------------------------
    @property
    def output_dir(self) -> Path:
        return self._output_dir

    # ---------------------------------------------------------
    # datasets
    # ---------------------------------------------------------
    @staticmethod
    def dataset_name(stem: str, tel_type_filter: int) -> str:
        if tel_type_filter != 0:
            return f"{stem}_{tel_type_filter}"
        return stem

    def dataset_dir(self, stem: str, tel_type_filter: int) -> Path:
        return self._output_dir / self.dataset_name(stem, tel_type_filter)

    @classmethod
    def tree_file_name(cls, tel_type: int) -> str:
        return f"{cls.TREE_PREFIX}{tel_type}.parquet"

    def dataset_file(self, stem: str, tel_type_filter: int, tel_type: int) -> Path:
        return self.dataset_dir(stem, tel_type_filter) / self.tree_file_name(tel_type)

    @classmethod
    def tel_type_from_tree_file(cls, path: Path) -> int:
        """
        dispTree_201511619.parquet -> 201511619
        """
        name = Path(path).stem
        if not name.startswith(cls.TREE_PREFIX):
            raise ValueError(f"not a training tree file: {path}")
        return int(name[len(cls.TREE_PREFIX):])

    # ---------------------------------------------------------
    # models
    # ---------------------------------------------------------
    def model_dir(self, stem: str, tel_type: int) -> Path:
        return self._output_dir / f"{stem}_{tel_type}.model"
