#!filepath: dispbdt/__init__.py

__version__ = "0.3.0"

from .utils.logger import Logging, logs
from .utils.filesystem import FileSystem
from .utils.path import PathManager
from .config.app_config import AppConfig

__all__ = [
    "__version__",
    "logs", "Logging",
    "FileSystem",
    "PathManager",
    "AppConfig",
]
