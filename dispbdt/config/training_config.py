# dispbdt/config/training_config.py
from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

DEFAULT_METHOD_OPTIONS = "VarTransform=N:NTrees=200:BoostType=AdaBoost:MaxDepth=8"

DEFAULT_QUALITY_CUT = (
    "size > 1 and ntubes > 4 "
    "and width > 0 and width < 2 "
    "and length > 0 and length < 10 "
    "and tgrad_x * tgrad_x < 100 * 100 "
    "and loss < 0.20"
)

ASTRI_TEL_TYPE = 201511619


class ReaderConfig(BaseModel):
    batch_size: int = Field(65536, gt=0)


class TrainingConfig(BaseModel):
    """
    TrainingConfig

    One config == one run:
      - assemble (input_list) OR reload (dataset_dir)
      - train one model per telescope type
    """

    # inputs / outputs
    input_list: Optional[Path] = None
    output_dir: Path = Path("output")
    array_list: Optional[Path] = None
    dataset_dir: Optional[Path] = None

    # selection
    train_fraction: float = Field(0.5, gt=0.0, lt=1.0)
    rec_id: int = Field(0, ge=0)
    tel_type: int = Field(0, ge=0)

    # model (opaque payloads for the trainer)
    trainer: str = "sklearn-bdt"
    target: str = "disp-angle"
    method_options: str = DEFAULT_METHOD_OPTIONS
    quality_cut: str = DEFAULT_QUALITY_CUT

    # split policy
    min_events: int = Field(100, ge=0)
    damping: float = Field(0.8, gt=0.0, le=1.0)
    seed: int = 0

    astri_tel_type: int = ASTRI_TEL_TYPE

    alignment_check: Literal["off", "warn", "strict"] = "warn"
    progress_every: int = Field(10000, ge=0)

    reader: ReaderConfig = Field(default_factory=ReaderConfig)

    @property
    def reload_mode(self) -> bool:
        return self.dataset_dir is not None
