"""Configuration management package.

This package provides a modular configuration system with support for:
- Built-in defaults with deep-merged user overrides
- JSON schema validation
- Environment variable overrides (RLM_*, optionally from a .env file)
- Path management and file operations

Usage:
    from rlm_backend.utils.config import ConfigManager

    config = ConfigManager()
    value = config.get("chunking.max_tokens", 512)
"""

from .manager import ConfigManager, merge_configs
from .paths import ConfigPaths
from .defaults import DEFAULT_CONFIG
from .file_operations import FileOperations
from .schema_validation import SchemaValidator, CONFIG_SCHEMA
from .environment import EnvironmentHandler, ENV_OVERRIDES

__all__ = [
    'ConfigManager',
    'merge_configs',
    'ConfigPaths',
    'DEFAULT_CONFIG',
    'FileOperations',
    'SchemaValidator',
    'CONFIG_SCHEMA',
    'EnvironmentHandler',
    'ENV_OVERRIDES',
]
