"""
File operations for configuration management.

This module provides path resolution, .env loading and JSON file loading for
the RLM configuration system.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from dotenv import load_dotenv

from ...exceptions.config_exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
)


logger = logging.getLogger(__name__)


class FileOperations:
    """
    File operations for configuration management.

    Handles file loading, path resolution, and environment variable loading.
    """

    def __init__(self, project_root: Path, env_file: str) -> None:
        """
        Initialize file operations.

        Args:
            project_root: Directory that relative paths are resolved against
            env_file: Environment file name
        """
        self.project_root = project_root
        self.env_file = env_file

    def resolve_path(self, path: Union[str, Path]) -> Path:
        """
        Resolve a path relative to the project root.

        Args:
            path: Path to resolve (can be relative or absolute, "~" is expanded)

        Returns:
            Resolved absolute path
        """
        path_obj = Path(path).expanduser()
        if path_obj.is_absolute():
            return path_obj
        return (self.project_root / path_obj).resolve()

    def load_environment_variables(self) -> bool:
        """
        Load environment variables from the .env file if it exists.

        Variables already set in the process environment take precedence.

        Returns:
            True if a .env file was loaded
        """
        env_file_path = self.resolve_path(self.env_file)
        if not env_file_path.exists():
            logger.debug(f"Environment file not found at {env_file_path}, skipping")
            return False

        logger.debug(f"Loading environment variables from {env_file_path}")
        return load_dotenv(env_file_path, override=False)

    def load_json_file(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load and parse a JSON object from a file.

        Args:
            file_path: Path to JSON file

        Returns:
            Parsed JSON data

        Raises:
            ConfigurationFileNotFoundError: If file doesn't exist
            ConfigurationError: If the file cannot be read or is not a JSON object
        """
        resolved_path = self.resolve_path(file_path)

        logger.debug(f"Attempting to load configuration file: {resolved_path}")

        if not resolved_path.exists():
            raise ConfigurationFileNotFoundError(
                f"Configuration file not found: {resolved_path}",
                str(resolved_path)
            )

        try:
            with open(resolved_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in configuration file: {e}",
                str(resolved_path),
                ["Check for trailing commas and unquoted keys"]
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Error reading configuration file: {e}",
                str(resolved_path)
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration file must contain a JSON object",
                str(resolved_path)
            )

        logger.info(f"Loaded configuration from {resolved_path}")
        return data
