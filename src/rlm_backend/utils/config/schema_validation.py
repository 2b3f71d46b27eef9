"""
Schema validation for configuration management.

This module holds the JSON schema of the RLM configuration and validates the
merged configuration against it with jsonschema.
"""

import logging
from typing import Any, Dict, List, Optional

import jsonschema

from ...exceptions.config_exceptions import ConfigurationValidationError


logger = logging.getLogger(__name__)

_NON_NEGATIVE_INT = {"type": "integer", "minimum": 0}
_POSITIVE_INT = {"type": "integer", "minimum": 1}
_HEADER_LEVEL = {"type": "integer", "minimum": 1, "maximum": 6}
_OPTIONAL_STRING = {"type": ["string", "null"]}

CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "session": {
            "type": "object",
            "properties": {
                "directory": _OPTIONAL_STRING,
            },
        },
        "chunking": {
            "type": "object",
            "properties": {
                "default_strategy": {
                    "type": "string",
                    "enum": ["uniform", "filter", "semantic", "token", "recursive", "auto"],
                },
                "chunk_size": _POSITIVE_INT,
                "overlap": _NON_NEGATIVE_INT,
                "context_size": _NON_NEGATIVE_INT,
                "min_level": _HEADER_LEVEL,
                "max_level": _HEADER_LEVEL,
                "min_size": _NON_NEGATIVE_INT,
                "max_size": _NON_NEGATIVE_INT,
                "merge_small": {"type": "boolean"},
                "max_tokens": _POSITIVE_INT,
                "overlap_tokens": _NON_NEGATIVE_INT,
                "min_chunk_size": _NON_NEGATIVE_INT,
                "token_encoding": {"type": "string", "minLength": 1},
            },
        },
        "results": {
            "type": "object",
            "properties": {
                "separator": {"type": "string"},
            },
        },
        "logging": {
            "type": "object",
            "properties": {
                "level": {
                    "type": "string",
                    "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL",
                             "debug", "info", "warning", "error", "critical"],
                },
                "format": {"type": "string", "enum": ["standard", "json", "detailed"]},
                "file": _OPTIONAL_STRING,
            },
        },
    },
}


class SchemaValidator:
    """
    Schema validation for configuration management.

    Collects every validation error rather than stopping at the first one.
    """

    def __init__(self, schema: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize schema validator.

        Args:
            schema: JSON schema to validate against (default: CONFIG_SCHEMA)
        """
        self.schema = schema if schema is not None else CONFIG_SCHEMA
        self._validator = jsonschema.Draft7Validator(self.schema)

    def iter_problems(self, config: Dict[str, Any]) -> List[jsonschema.ValidationError]:
        return sorted(self._validator.iter_errors(config), key=lambda e: [str(p) for p in e.absolute_path])

    def validate_config(self, config: Dict[str, Any], config_file: str = "unknown") -> bool:
        """
        Validate configuration against the schema.

        Args:
            config: Configuration to validate
            config_file: Configuration file name for error reporting

        Returns:
            True if validation passes

        Raises:
            ConfigurationValidationError: If validation fails
        """
        errors = self.iter_problems(config)
        if not errors:
            return True

        validation_errors = []
        invalid_fields = []
        for error in errors:
            field_path = ".".join(str(p) for p in error.absolute_path)
            validation_errors.append(f"{field_path}: {error.message}" if field_path else error.message)
            if field_path:
                invalid_fields.append(field_path)

        logger.debug(f"Configuration validation failed with {len(errors)} error(s)")
        raise ConfigurationValidationError(
            f"Configuration validation failed: {errors[0].message}",
            config_file,
            validation_errors,
            invalid_fields
        )
