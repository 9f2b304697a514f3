# dispbdt/training/engines/variable_schema_engine.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple

from dispbdt.config.training_config import ASTRI_TEL_TYPE
from dispbdt.training.target import TargetLabel

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class VariableSchema:
    """
    Model inputs / spectators / target for one telescope type.

    - variables  : input expressions over dataset columns (order == feature order)
    - spectators : carried through for auditing, NEVER model inputs
    - target     : exactly one regression target
    """
    variables: Tuple[str, ...]
    spectators: Tuple[str, ...]
    target: TargetLabel

    @property
    def target_column(self) -> str:
        return self.target.column

    def referenced_columns(self) -> List[str]:
        """
        Dataset columns referenced by variables, spectators and target.
        """
        names: List[str] = []
        for expr in self.variables + self.spectators + (self.target.column,):
            for name in _IDENTIFIER.findall(expr):
                if name not in names:
                    names.append(name)
        return names


class VariableSchemaEngine:
    """
    VariableSchemaEngine

    Shape / timing inputs, fixed spectators, one target.
    The time-gradient input is dropped for telescope types without
    timing information (ASTRI).
    """

    TIME_GRADIENT = "tgrad_x*tgrad_x"

    VARIABLES = (
        "width",
        "length",
        "wol",
        "size",
        TIME_GRADIENT,
        "asym",
        "loss",
        "dist",
        "fui",
    )

    SPECTATORS = (
        "MCe0",
        "MCxoff",
        "MCyoff",
        "MCxcore",
        "MCycore",
        "MCrcore",
        "NImages",
    )

    def __init__(self, astri_tel_type: int = ASTRI_TEL_TYPE):
        self.astri_tel_type = astri_tel_type

    def build(self, tel_type: int, target: TargetLabel) -> VariableSchema:
        variables = tuple(
            v for v in self.VARIABLES
            if not (v == self.TIME_GRADIENT and tel_type == self.astri_tel_type)
        )
        return VariableSchema(
            variables=variables,
            spectators=self.SPECTATORS,
            target=target,
        )
