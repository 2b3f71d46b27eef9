"""
Configuration-related exceptions for the RLM backend.

Raised while loading `rlm.config.json`, applying environment overrides and
validating the merged settings against the configuration schema.
"""

from typing import List, Optional, Tuple

from .rlm_exceptions import RlmError


class ConfigurationError(RlmError):
    """
    Problem with the configuration file or the settings built from it.

    Args:
        message: Error description
        config_file: File the problem was found in, when there is one
        suggestions: Fixes to show the user
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ) -> None:
        super().__init__(message, suggestions)
        self.config_file = config_file

    def context_lines(self) -> List[str]:
        return [f"Config file: {self.config_file}"] if self.config_file else []


class ConfigurationFileNotFoundError(ConfigurationError):
    """The file named with --config-path does not exist."""

    def __init__(self, message: str, config_file: Optional[str] = None) -> None:
        super().__init__(
            message,
            config_file,
            [
                "Check the path passed to --config-path",
                "Omit --config-path to run with built-in defaults",
            ],
        )


class ConfigurationValidationError(ConfigurationError):
    """
    The merged configuration failed schema validation.

    Every schema violation is collected; `invalid_fields` holds the dotted
    paths (e.g. ``chunking.chunk_size``) so callers can point at them.
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        validation_errors: Optional[List[str]] = None,
        invalid_fields: Optional[List[str]] = None
    ) -> None:
        self.validation_errors = list(validation_errors or [])
        self.invalid_fields = list(invalid_fields or [])

        hints = ["Sizes, levels and token counts are integers; merge_small is true or false"]
        if self.invalid_fields:
            hints.append("Correct " + ", ".join(self.invalid_fields))
        super().__init__(message, config_file, hints)

    def sections(self) -> List[Tuple[str, List[str]]]:
        return [("Validation errors", self.validation_errors), *super().sections()]


class EnvironmentVariableError(ConfigurationError):
    """An RLM_* override could not be converted to the setting's type."""

    def __init__(self, message: str, variable_name: Optional[str] = None) -> None:
        hints = [f"Check {variable_name} in the environment and in .env"] if variable_name else None
        super().__init__(message, None, hints)
        self.variable_name = variable_name
