"""
Configuration file paths and constants for the RLM backend.

This module provides the ConfigPaths dataclass containing the file names
used by the configuration system and the session store.
"""

from dataclasses import dataclass


@dataclass
class ConfigPaths:
    """Configuration file paths and constants."""

    DEFAULT_CONFIG_FILE: str = "rlm.config.json"
    ENV_FILE: str = ".env"
    DEFAULT_SESSION_FILE: str = ".rlm-session.json"
    NAMED_SESSION_FILE: str = "rlm-session-{session_id}.json"
    NAMED_SESSION_GLOB: str = "rlm-session-*.json"
