# dispbdt/training/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dispbdt.config.training_config import TrainingConfig
from dispbdt.training.engines.array_config_engine import ArrayConfiguration
from dispbdt.training.engines.dataset_router_engine import DatasetCollection
from dispbdt.training.engines.split_policy_engine import TrainTestSplit
from dispbdt.training.engines.train_result import TrainResult
from dispbdt.training.engines.variable_schema_engine import VariableSchema
from dispbdt.training.target import TargetLabel
from dispbdt.utils.path import PathManager


@dataclass
class TrainingContext:
    """
    TrainingContext (FINAL / FROZEN)

    Semantics:
    - One context == one training run
    - run_id and target are immutable and mandatory
    - datasets is the ONLY shared state; the router writes it during assembly
    """

    # -------------------------
    # Identity (FROZEN)
    # -------------------------
    run_id: str
    target: TargetLabel

    # -------------------------
    # Static bindings
    # -------------------------
    cfg: TrainingConfig
    inst: Any
    pm: PathManager

    # -------------------------
    # Setup state
    # -------------------------
    sources: List[Path] = field(default_factory=list)
    array_config: Optional[ArrayConfiguration] = None
    datasets: DatasetCollection = field(default_factory=DatasetCollection)
    dataset_files: List[Path] = field(default_factory=list)

    # -------------------------
    # Per telescope type (rolling)
    # -------------------------
    tel_type: Optional[int] = None
    split: Optional[TrainTestSplit] = None
    schema: Optional[VariableSchema] = None
    train_result: Optional[TrainResult] = None

    # -------------------------
    # Run summary
    # -------------------------
    artifacts: Dict[int, Path] = field(default_factory=dict)
    failed_types: Dict[int, str] = field(default_factory=dict)

    def reset_type_state(self, tel_type: int) -> None:
        self.tel_type = tel_type
        self.split = None
        self.schema = None
        self.train_result = None
