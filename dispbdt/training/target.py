# dispbdt/training/target.py
from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from dispbdt.utils.errors import UnknownTargetError


class TargetLabel(Enum):
    """
    TargetLabel (closed set of regression targets)

    Each member carries:
      - column      : dataset column used as regression target
      - file_stem   : prefix of dataset / model artifact names
      - valid_range : (low, high) accepted target values, None = unrestricted
      - selector    : CLI spelling
    """

    ANGLE_DISP = ("disp", "BDTDisp", None, "disp-angle")
    ANGLE_ERROR = ("dispError", "BDTDispError", (0.0, 10.0), "disp-error")
    ENERGY_RATIO = ("dispEnergy", "BDTDispEnergy", None, "disp-energy")
    CORE_DISTANCE = ("dispCore", "BDTDispCore", (0.0, 1.0e5), "disp-core")

    def __init__(
        self,
        column: str,
        file_stem: str,
        valid_range: Optional[Tuple[float, float]],
        selector: str,
    ):
        self.column = column
        self.file_stem = file_stem
        self.valid_range = valid_range
        self.selector = selector

    @classmethod
    def parse(cls, value: "str | TargetLabel") -> "TargetLabel":
        """
        Decode a selector once at the boundary.

        Accepted (case-insensitive):
          disp-angle | disp-error | disp-energy | disp-core
          BDTDisp    | BDTDispError | BDTDispEnergy | BDTDispCore
          member names (ANGLE_DISP, ...)
        """
        if isinstance(value, cls):
            return value

        key = str(value).strip().lower()
        for member in cls:
            if key in (member.selector, member.file_stem.lower(), member.name.lower()):
                return member

        allowed = ", ".join(m.selector for m in cls)
        raise UnknownTargetError(f"unknown target label: {value!r} (allowed: {allowed})")

    def __str__(self) -> str:
        return self.selector
