# dispbdt/training/engines/model/method_options.py
from __future__ import annotations

from typing import Dict, Iterator, Tuple


class MethodOptions:
    """
    Colon-separated option string of the BDT method.

        "VarTransform=N:NTrees=200:BoostType=AdaBoost:MaxDepth=8:!H:V"

    - Key=Value      -> value (string)
    - Flag / !Flag   -> "True" / "False"
    Keys are case-insensitive; the last occurrence wins.
    """

    def __init__(self, raw: str):
        self.raw = raw or ""
        self._values: Dict[str, Tuple[str, str]] = {}

        for token in self.raw.split(":"):
            token = token.strip()
            if not token:
                continue

            if "=" in token:
                key, value = token.split("=", 1)
                key, value = key.strip(), value.strip()
            elif token.startswith("!"):
                key, value = token[1:].strip(), "False"
            else:
                key, value = token, "True"

            if not key:
                raise ValueError(f"malformed method option '{token}' in '{self.raw}'")

            self._values[key.lower()] = (key, value)

    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self._values.values())

    def get(self, key: str, default: str | None = None) -> str | None:
        item = self._values.get(key.lower())
        return item[1] if item is not None else default

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"method option {key}={value} is not an integer") from None

    def get_float(self, key: str, default: float) -> float:
        value = self.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"method option {key}={value} is not a number") from None

    def get_bool(self, key: str, default: bool) -> bool:
        value = self.get(key)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def __repr__(self) -> str:
        return f"MethodOptions({self.raw!r})"
