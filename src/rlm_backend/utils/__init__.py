"""Utility modules: configuration management and logging setup."""

from .config import ConfigManager
from .logging_config import JSONFormatter, LogFormat, LoggingManager, LogLevel

__all__ = [
    "ConfigManager",
    "JSONFormatter",
    "LogFormat",
    "LoggingManager",
    "LogLevel",
]
