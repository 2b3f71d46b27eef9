"""
Environment variable overrides for configuration management.

Each RLM_* variable replaces one configuration key. Variables are read
after `.env` has been loaded, so a `.env` file and the real environment
behave the same; empty variables are treated as unset.
"""

import logging
import os
from copy import deepcopy
from typing import Any, Callable, Dict, NamedTuple

from ...exceptions.config_exceptions import EnvironmentVariableError


logger = logging.getLogger(__name__)


class EnvOverride(NamedTuple):
    """Configuration key set by an environment variable, and its converter."""
    key: str
    convert: Callable[[str], Any] = str


ENV_OVERRIDES: Dict[str, EnvOverride] = {
    'RLM_SESSION_DIR': EnvOverride('session.directory'),
    'RLM_LOG_LEVEL': EnvOverride('logging.level'),
    'RLM_LOG_FILE': EnvOverride('logging.file'),
    'RLM_DEFAULT_STRATEGY': EnvOverride('chunking.default_strategy', lambda v: v.strip().lower()),
    'RLM_TOKEN_ENCODING': EnvOverride('chunking.token_encoding'),
    'RLM_MAX_TOKENS': EnvOverride('chunking.max_tokens', int),
}


def set_dotted(config: Dict[str, Any], key_path: str, value: Any) -> None:
    """Set ``config['a']['b']`` for ``'a.b'``, creating missing sections."""
    *parents, leaf = key_path.split('.')
    for part in parents:
        if not isinstance(config.get(part), dict):
            config[part] = {}
        config = config[part]
    config[leaf] = value


class EnvironmentHandler:
    """Applies ENV_OVERRIDES to a configuration dictionary."""

    def __init__(self, overrides: Dict[str, EnvOverride] = ENV_OVERRIDES):
        self.overrides = overrides

    def apply_environment_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Return a copy of the configuration with environment overrides applied.

        Raises:
            EnvironmentVariableError: If a value cannot be converted
        """
        result = deepcopy(config)

        for name, value in self.active_values().items():
            override = self.overrides[name]
            try:
                converted = override.convert(value)
            except ValueError as e:
                raise EnvironmentVariableError(
                    f"Invalid value '{value}' for {name} ({override.key}): {e}",
                    name
                ) from e
            set_dotted(result, override.key, converted)
            logger.debug(f"{name} overrides {override.key}")

        return result

    def active_values(self) -> Dict[str, str]:
        """Raw values of the override variables that are set and non-empty."""
        return {name: os.environ[name] for name in self.overrides if os.environ.get(name)}

    def active_overrides(self) -> Dict[str, str]:
        """Set override variables mapped to the configuration keys they replace."""
        return {name: self.overrides[name].key for name in self.active_values()}
