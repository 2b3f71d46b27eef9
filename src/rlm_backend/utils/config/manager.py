"""
Main configuration manager for the RLM backend.

This module provides the ConfigManager class that orchestrates loading the
optional configuration file, merging it over the built-in defaults, applying
environment overrides and validating the result.
"""

import json
import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...core.chunking import ChunkingOptions, ChunkingStrategy
from ...exceptions.config_exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
)
from .defaults import DEFAULT_CONFIG
from .environment import EnvironmentHandler
from .file_operations import FileOperations
from .paths import ConfigPaths
from .schema_validation import SchemaValidator


logger = logging.getLogger(__name__)

_MISSING = object()


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep-merge configuration dictionaries.

    Later configs override earlier ones; nested dictionaries are merged key
    by key, every other value is replaced.
    """
    result: Dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            if isinstance(value, dict) and isinstance(result.get(key), dict):
                result[key] = merge_configs(result[key], value)
            else:
                result[key] = deepcopy(value)
    return result


class ConfigManager:
    """
    Configuration manager for the RLM backend.

    Handles loading, validation, and merging of configuration from multiple sources:
    - Built-in defaults
    - The user configuration file (rlm.config.json)
    - Environment variables (RLM_*), including those from a .env file

    An explicitly requested configuration file must exist. The default file
    is optional; without it the defaults apply.

    Example:
        >>> manager = ConfigManager(load_env=False)
        >>> manager.get("chunking.max_tokens")
        512
    """

    def __init__(
        self,
        config_file: Optional[str] = None,
        project_root: Optional[Union[str, Path]] = None,
        load_env: bool = True,
    ) -> None:
        """
        Initialize the ConfigManager.

        Args:
            config_file: Path to configuration file (default: rlm.config.json, optional)
            project_root: Directory relative paths resolve against (default: cwd)
            load_env: Whether to load environment variables from .env file
        """
        self.project_root = Path(project_root or os.getcwd()).resolve()
        self.paths = ConfigPaths()
        self.explicit_config_file = config_file is not None
        self.config_file = config_file or self.paths.DEFAULT_CONFIG_FILE

        self._config: Dict[str, Any] = {}
        self._loaded = False
        self._file_loaded = False

        self.file_ops = FileOperations(self.project_root, self.paths.ENV_FILE)
        self.schema_validator = SchemaValidator()
        self.env_handler = EnvironmentHandler()

        if load_env:
            self.file_ops.load_environment_variables()

    @property
    def config(self) -> Dict[str, Any]:
        """Get the current configuration. Loads if not already loaded."""
        if not self._loaded:
            self.load_config()
        return deepcopy(self._config)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def file_loaded(self) -> bool:
        """Whether a configuration file contributed to the configuration."""
        return self._file_loaded

    def load_config(self, force_reload: bool = False) -> Dict[str, Any]:
        """
        Load configuration from all sources.

        Args:
            force_reload: Read the file and environment again even if already loaded

        Returns:
            Loaded configuration dictionary

        Raises:
            ConfigurationFileNotFoundError: If an explicit config file is missing
            ConfigurationError: If the file cannot be parsed
            ConfigurationValidationError: If validation fails
            EnvironmentVariableError: If an override cannot be converted
        """
        if self._loaded and not force_reload:
            logger.debug("Configuration already loaded, returning cached version")
            return deepcopy(self._config)

        user_config: Dict[str, Any] = {}
        self._file_loaded = False
        try:
            user_config = self.file_ops.load_json_file(self.config_file)
            self._file_loaded = True
        except ConfigurationFileNotFoundError:
            if self.explicit_config_file:
                raise
            logger.debug(f"No configuration file at {self.config_file}, using defaults")

        merged_config = merge_configs(DEFAULT_CONFIG, user_config)

        logger.debug("Applying environment variable overrides")
        merged_config = self.env_handler.apply_environment_overrides(merged_config)

        self.schema_validator.validate_config(merged_config, self.config_file)

        self._config = merged_config
        self._loaded = True
        logger.debug("Configuration loaded successfully")
        return deepcopy(self._config)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by key using dot notation.

        Args:
            key: Configuration key (supports dot notation like 'chunking.max_tokens')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        config = self.config
        try:
            for k in key.split('.'):
                config = config[k]
            return config
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value by key using dot notation.

        Note:
            This modifies the in-memory configuration only.
        """
        if not self._loaded:
            self.load_config()

        keys = key.split('.')
        config = self._config
        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    # Typed accessors

    def chunking_options(self, **overrides: Any) -> ChunkingOptions:
        """
        Build ChunkingOptions from the chunking section.

        Args:
            **overrides: Option values that take precedence; None values are ignored

        Returns:
            Validated ChunkingOptions
        """
        section = dict(self.get("chunking", {}))
        section.pop("default_strategy", None)
        return ChunkingOptions.from_dict(section).merged_with(**overrides)

    def default_strategy(self) -> ChunkingStrategy:
        return ChunkingStrategy.from_string(self.get("chunking.default_strategy", "uniform"))

    def session_directory(self) -> Path:
        """Directory holding session files (home directory by default)."""
        directory = self.get("session.directory")
        if not directory:
            return Path.home()
        return self.file_ops.resolve_path(directory)

    def results_separator(self) -> str:
        return self.get("results.separator", DEFAULT_CONFIG["results"]["separator"])

    def log_level(self) -> str:
        return str(self.get("logging.level", "WARNING")).upper()

    def log_format(self) -> str:
        return self.get("logging.format", "standard")

    def log_file(self) -> Optional[Path]:
        log_file = self.get("logging.file")
        return self.file_ops.resolve_path(log_file) if log_file else None

    def get_config_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the current configuration state.

        Returns:
            Dictionary with configuration summary
        """
        summary = {
            "loaded": self._loaded,
            "config_file": self.config_file,
            "config_file_loaded": self._file_loaded,
            "project_root": str(self.project_root),
            "environment_overrides": self.env_handler.active_overrides(),
            "config_keys": [],
        }
        if self._loaded:
            summary["config_keys"] = self._get_all_keys(self._config)
            summary["total_config_size"] = len(json.dumps(self._config))
        return summary

    def _get_all_keys(self, config: Dict[str, Any], prefix: str = "") -> List[str]:
        keys = []
        for key, value in config.items():
            full_key = f"{prefix}.{key}" if prefix else key
            keys.append(full_key)
            if isinstance(value, dict):
                keys.extend(self._get_all_keys(value, full_key))
        return keys


__all__ = ["ConfigManager", "ConfigurationError", "merge_configs"]
