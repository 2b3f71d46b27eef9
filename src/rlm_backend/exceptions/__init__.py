"""
Exceptions package for the RLM backend.

This package contains the typed error kinds raised by the chunking engine,
the session model, the session store and the configuration system.
"""

from .rlm_exceptions import (
    RlmError,
    InvalidArgumentError,
    PreconditionNotMetError,
    ChunkingCancelledError,
    SessionStoreError,
)

from .config_exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
    EnvironmentVariableError,
)

__all__ = [
    # Chunking and session errors
    "RlmError",
    "InvalidArgumentError",
    "PreconditionNotMetError",
    "ChunkingCancelledError",
    "SessionStoreError",
    # Configuration errors
    "ConfigurationError",
    "ConfigurationFileNotFoundError",
    "ConfigurationValidationError",
    "EnvironmentVariableError",
]
