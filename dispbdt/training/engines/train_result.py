# dispbdt/training/engines/train_result.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List


@dataclass(frozen=True)
class TrainResult:
    """
    TrainResult (FINAL / FROZEN)

    Semantics:
    - result of one training for one telescope type
    - model is in memory; report_files were written by the trainer
    """
    model: Any
    metrics: Dict[str, Any]
    n_train: int
    n_test: int
    feature_names: List[str]
    report_files: List[Path] = field(default_factory=list)
