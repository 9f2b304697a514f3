from .app_config import AppConfig, default_config_path
from .log_config import LogConfig
from .training_config import TrainingConfig, ReaderConfig

__all__ = ["AppConfig", "default_config_path", "LogConfig", "TrainingConfig", "ReaderConfig"]
