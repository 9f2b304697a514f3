# dispbdt/training/engines/registry.py
from typing import Callable, Dict

from dispbdt.config.training_config import TrainingConfig
from dispbdt.training.engines.model.bdt_regressor_train_engine import (
    SklearnBDTRegressorTrainEngine,
)
from dispbdt.training.engines.model_train_engine import ModelTrainEngine
from dispbdt.utils.errors import ConfigurationError

_ENGINE_REGISTRY: Dict[str, Callable[[TrainingConfig], ModelTrainEngine]] = {
    "sklearn-bdt": lambda cfg: SklearnBDTRegressorTrainEngine(cfg),
}


def resolve_model_train_engine(cfg: TrainingConfig) -> ModelTrainEngine:
    key = cfg.trainer

    if key not in _ENGINE_REGISTRY:
        available = ", ".join(sorted(_ENGINE_REGISTRY))
        raise ConfigurationError(
            f"No ModelTrainEngine for '{key}'. Available: {available}"
        )

    return _ENGINE_REGISTRY[key](cfg)
