# dispbdt/training/engines/model_train_engine.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import pyarrow as pa

from dispbdt.training.engines.split_policy_engine import TrainTestSplit
from dispbdt.training.engines.train_result import TrainResult
from dispbdt.training.engines.variable_schema_engine import VariableSchema


@dataclass(frozen=True)
class TrainRequest:
    """
    Everything the trainer needs for one telescope type.

    quality_cut and method_options are opaque to the orchestration.
    """
    tel_type: int
    method_name: str
    table: pa.Table
    schema: VariableSchema
    split: TrainTestSplit
    quality_cut: str
    method_options: str
    seed: int
    report_dir: Path


class ModelTrainEngine(ABC):
    """
    Abstract ModelTrainEngine (FINAL)
    """

    def __init__(self, cfg):
        self.cfg = cfg

    @abstractmethod
    def train(self, request: TrainRequest) -> TrainResult:
        """
        Split, fit, evaluate on the test part, write the report.
        """
        raise NotImplementedError
