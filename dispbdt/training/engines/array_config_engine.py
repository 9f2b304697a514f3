# dispbdt/training/engines/array_config_engine.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from dispbdt import logs
from dispbdt.event_store.parquet_chain import ParquetChain, TELCONFIG
from dispbdt.utils.errors import ConfigurationError
from dispbdt.utils.filesystem import FileSystem

TELCONFIG_COLUMNS = ["TelID_hyperArray", "TelType", "TelX", "TelY", "TelZ"]


@dataclass(frozen=True)
class TelescopeRecord:
    """
    Static attributes of one telescope (row `index` of telconfig).
    """
    index: int
    tel_id: int
    hyper_array_id: int
    tel_type: int
    x: float
    y: float
    z: float
    fov: float


@dataclass(frozen=True)
class ArrayConfiguration:
    """
    ArrayConfiguration

    Invariants:
      - len(active) == len(telescopes)
      - active[i] refers to telescopes[i] (telconfig row order, NOT type order)
    """
    telescopes: Tuple[TelescopeRecord, ...]
    active: Tuple[bool, ...]

    def __post_init__(self):
        if len(self.active) != len(self.telescopes):
            raise ConfigurationError(
                f"Error in telescope list size: {len(self.active)}, {len(self.telescopes)}"
            )

    @property
    def n_tel(self) -> int:
        return len(self.telescopes)

    @staticmethod
    def type_matches(telescope: TelescopeRecord, tel_type_filter: int) -> bool:
        return tel_type_filter == 0 or telescope.tel_type == tel_type_filter

    def is_selected(self, index: int, tel_type_filter: int) -> bool:
        return self.active[index] and self.type_matches(self.telescopes[index], tel_type_filter)

    def selected(self, tel_type_filter: int) -> List[int]:
        return [i for i in range(self.n_tel) if self.is_selected(i, tel_type_filter)]

    def tel_types(self, tel_type_filter: int = 0) -> List[int]:
        return sorted({self.telescopes[i].tel_type for i in self.selected(tel_type_filter)})


class ArrayConfigEngine:
    """
    ArrayConfigEngine

    Responsibility:
      - read the telescope table of ONE representative source (first input)
      - build the per-telescope active mask from an optional array list

    Contract:
      - telescope count == telconfig row count, zero rows is fatal
      - no array list -> every telescope active
      - array list    -> only telescopes whose hyper-array id is listed
    """

    def load(
        self,
        source: Path,
        array_list: Optional[Path] = None,
    ) -> ArrayConfiguration:
        telescopes = self.read_telescopes(source)

        active = self.read_array_list(
            len(telescopes),
            array_list,
            [t.hyper_array_id for t in telescopes],
        )

        config = ArrayConfiguration(telescopes=tuple(telescopes), active=tuple(active))

        logs.info(
            f"[ArrayConfig] total number of telescopes: {config.n_tel} "
            f"(active {sum(config.active)})"
        )
        return config

    # ------------------------------------------------------------------
    def read_telescopes(self, source: Path) -> List[TelescopeRecord]:
        table = ParquetChain([source], TELCONFIG).read_table()

        missing = [c for c in TELCONFIG_COLUMNS if c not in table.column_names]
        if missing:
            raise ConfigurationError(f"telconfig in {source} lacks columns {missing}")

        if table.num_rows == 0:
            raise ConfigurationError(f"no telescopes found in telconfig of {source}")

        rows = table.to_pylist()
        telescopes: List[TelescopeRecord] = []
        for i, row in enumerate(rows):
            tel_id = row.get("TelID")
            telescopes.append(
                TelescopeRecord(
                    index=i,
                    tel_id=int(tel_id) if tel_id is not None else i + 1,
                    hyper_array_id=int(row["TelID_hyperArray"]),
                    tel_type=int(row["TelType"]),
                    x=float(row["TelX"]),
                    y=float(row["TelY"]),
                    z=float(row["TelZ"]),
                    fov=float(row.get("FOV", 0.0) or 0.0),
                )
            )
            logs.debug(
                f"[ArrayConfig] FOV for telescope {telescopes[-1].hyper_array_id}: "
                f"{telescopes[-1].fov}"
            )

        return telescopes

    # ------------------------------------------------------------------
    @staticmethod
    def read_array_list(
        n_tel: int,
        array_list: Optional[Path],
        hyper_array_ids: Sequence[int],
    ) -> List[bool]:
        """
        Per-telescope mask from a newline-delimited list of hyper-array ids.

        O(n_tel x listed ids); ids may repeat without effect.
        """
        if array_list is None or str(array_list) == "":
            return [True] * n_tel

        try:
            lines = FileSystem.read_lines(array_list)
        except OSError as e:
            raise ConfigurationError(f"error reading list of arrays from {array_list} ({e})") from e

        logs.info(f"[ArrayConfig] reading list of telescopes from {array_list}")

        mask = [False] * n_tel
        for line in lines:
            try:
                listed = int(line)
            except ValueError as e:
                raise ConfigurationError(
                    f"invalid telescope id {line!r} in {array_list}"
                ) from e

            for i, hyper_id in enumerate(hyper_array_ids):
                if hyper_id == listed and i < n_tel:
                    mask[i] = True

        return mask
