#!filepath: dispbdt/config/app_config.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field, ValidationError

from .log_config import LogConfig
from .training_config import TrainingConfig
from dispbdt.utils.errors import ConfigurationError


def default_config_path() -> Path:
    """
    Packaged defaults: dispbdt/config/base.yml
    (independent of the current working directory)
    """
    return Path(__file__).with_name("base.yml")


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    training: TrainingConfig = Field(default_factory=TrainingConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> "AppConfig":
        """
        Load YAML config.
        - default: dispbdt/config/base.yml
        - missing file / schema violation -> ConfigurationError
        """
        if path is None:
            path = default_config_path()

        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        try:
            return cls(**raw)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid config {path}:\n{e}") from e

    def with_training(self, **overrides: Any) -> "AppConfig":
        """
        Return a copy whose training section is re-validated with overrides
        (None values are ignored).
        """
        update: Dict[str, Any] = {k: v for k, v in overrides.items() if v is not None}
        merged = {**self.training.model_dump(), **update}

        try:
            training = TrainingConfig.model_validate(merged)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid training parameters:\n{e}") from e

        return self.model_copy(update={"training": training})
