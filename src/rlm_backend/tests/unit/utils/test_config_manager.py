"""
Tests for the configuration system: defaults, configuration file,
environment overrides and schema validation.
"""

import json
from pathlib import Path

import pytest

from rlm_backend.core.chunking import ChunkingStrategy
from rlm_backend.exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
    EnvironmentVariableError,
)
from rlm_backend.utils.config import ConfigManager, DEFAULT_CONFIG, merge_configs


def write_config(directory: Path, data: dict, name: str = "rlm.config.json") -> Path:
    path = directory / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestConfigDefaults:
    """Test running without a configuration file."""

    def setup_method(self):
        """Set up test fixtures."""
        self.expected_max_tokens = DEFAULT_CONFIG["chunking"]["max_tokens"]

    def test_defaults_without_file(self, tmp_path, clean_env):
        """Test that a missing default file falls back to built-in values."""
        manager = ConfigManager(project_root=tmp_path, load_env=False)

        assert manager.get("chunking.max_tokens") == self.expected_max_tokens
        assert not manager.file_loaded
        assert manager.is_loaded
        assert manager.default_strategy() == ChunkingStrategy.UNIFORM
        assert manager.session_directory() == Path.home()
        assert manager.results_separator() == "\n\n---\n\n"
        assert manager.log_level() == "WARNING"
        assert manager.log_file() is None

    def test_config_is_a_copy(self, tmp_path, clean_env):
        """Test that callers cannot mutate the loaded configuration."""
        manager = ConfigManager(project_root=tmp_path, load_env=False)

        manager.config["chunking"]["chunk_size"] = 1

        assert manager.get("chunking.chunk_size") == 50000

    def test_get_set_has(self, tmp_path, clean_env):
        """Test dotted access to configuration values."""
        manager = ConfigManager(project_root=tmp_path, load_env=False)

        manager.set("results.separator", " | ")

        assert manager.results_separator() == " | "
        assert manager.has("chunking.overlap")
        assert not manager.has("chunking.missing")
        assert manager.get("no.such.key", "fallback") == "fallback"

    def test_chunking_options(self, tmp_path, clean_env):
        """Test that options come from the chunking section plus overrides."""
        manager = ConfigManager(project_root=tmp_path, load_env=False)

        options = manager.chunking_options(pattern="x", chunk_size=None, context_size=20)

        assert options.pattern == "x"
        assert options.chunk_size == 50000
        assert options.context_size == 20

    def test_summary(self, tmp_path, clean_env):
        """Test the configuration summary."""
        manager = ConfigManager(project_root=tmp_path, load_env=False)
        manager.load_config()

        summary = manager.get_config_summary()

        assert summary["loaded"]
        assert "chunking.max_tokens" in summary["config_keys"]
        assert summary["environment_overrides"] == {}


class TestConfigFile:
    """Test loading the configuration file."""

    def test_file_is_merged_over_defaults(self, tmp_path, clean_env):
        """Test that the file only needs to name the values it changes."""
        write_config(tmp_path, {
            "chunking": {"chunk_size": 1000, "default_strategy": "semantic"},
            "logging": {"level": "debug"},
        })

        manager = ConfigManager(project_root=tmp_path, load_env=False)

        assert manager.file_loaded
        assert manager.get("chunking.chunk_size") == 1000
        assert manager.get("chunking.overlap") == 0
        assert manager.default_strategy() == ChunkingStrategy.SEMANTIC
        assert manager.log_level() == "DEBUG"

    def test_relative_paths_resolve_against_project_root(self, tmp_path, clean_env):
        """Test that session and log paths in the file are project-relative."""
        write_config(tmp_path, {"session": {"directory": "state"}, "logging": {"file": "logs/rlm.log"}})

        manager = ConfigManager(project_root=tmp_path, load_env=False)

        assert manager.session_directory() == (tmp_path / "state").resolve()
        assert manager.log_file() == (tmp_path / "logs" / "rlm.log").resolve()

    def test_force_reload_reads_changed_file(self, tmp_path, clean_env):
        """Test that a loaded configuration is cached until a forced reload."""
        write_config(tmp_path, {"chunking": {"chunk_size": 1000}})
        manager = ConfigManager(project_root=tmp_path, load_env=False)
        manager.load_config()

        write_config(tmp_path, {"chunking": {"chunk_size": 2000}})

        assert manager.load_config()["chunking"]["chunk_size"] == 1000
        assert manager.load_config(force_reload=True)["chunking"]["chunk_size"] == 2000

    def test_explicit_missing_file(self, tmp_path, clean_env):
        """Test that a requested file that does not exist is an error."""
        manager = ConfigManager(config_file="custom.json", project_root=tmp_path, load_env=False)

        with pytest.raises(ConfigurationFileNotFoundError):
            manager.load_config()

    def test_explicit_file(self, tmp_path, clean_env):
        """Test loading a file given by path."""
        write_config(tmp_path, {"chunking": {"max_tokens": 128}}, name="custom.json")

        manager = ConfigManager(config_file="custom.json", project_root=tmp_path, load_env=False)

        assert manager.get("chunking.max_tokens") == 128

    def test_invalid_json(self, tmp_path, clean_env):
        """Test that a malformed file is a configuration error."""
        (tmp_path / "rlm.config.json").write_text("{broken", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            ConfigManager(project_root=tmp_path, load_env=False).load_config()

    def test_validation_errors_are_collected(self, tmp_path, clean_env):
        """Test that every invalid field is reported."""
        write_config(tmp_path, {"chunking": {"chunk_size": 0, "merge_small": "yes"}})

        with pytest.raises(ConfigurationValidationError) as exc_info:
            ConfigManager(project_root=tmp_path, load_env=False).load_config()

        assert set(exc_info.value.invalid_fields) == {"chunking.chunk_size", "chunking.merge_small"}
        assert "Validation errors" in str(exc_info.value)

    def test_unknown_strategy_in_file(self, tmp_path, clean_env):
        """Test that the default strategy must be a known name."""
        write_config(tmp_path, {"chunking": {"default_strategy": "magic"}})

        with pytest.raises(ConfigurationValidationError):
            ConfigManager(project_root=tmp_path, load_env=False).load_config()


class TestEnvironmentOverrides:
    """Test RLM_* environment variables and the .env file."""

    def test_environment_overrides_file(self, tmp_path, clean_env):
        """Test that environment variables take precedence over the file."""
        write_config(tmp_path, {"chunking": {"max_tokens": 128}})
        clean_env.setenv("RLM_MAX_TOKENS", "256")
        clean_env.setenv("RLM_SESSION_DIR", str(tmp_path / "sessions"))

        manager = ConfigManager(project_root=tmp_path, load_env=False)

        assert manager.get("chunking.max_tokens") == 256
        assert manager.session_directory() == tmp_path / "sessions"
        assert "RLM_MAX_TOKENS" in manager.get_config_summary()["environment_overrides"]

    def test_empty_variable_is_ignored(self, tmp_path, clean_env):
        """Test that an empty variable does not override."""
        clean_env.setenv("RLM_LOG_LEVEL", "")

        assert ConfigManager(project_root=tmp_path, load_env=False).log_level() == "WARNING"

    def test_conversion_error(self, tmp_path, clean_env):
        """Test that a non-integer for an integer setting is reported."""
        clean_env.setenv("RLM_MAX_TOKENS", "many")

        with pytest.raises(EnvironmentVariableError) as exc_info:
            ConfigManager(project_root=tmp_path, load_env=False).load_config()

        assert exc_info.value.variable_name == "RLM_MAX_TOKENS"

    def test_dotenv_file(self, tmp_path, clean_env):
        """Test that variables from .env are applied."""
        (tmp_path / ".env").write_text("RLM_DEFAULT_STRATEGY=token\n", encoding="utf-8")
        # registered so the variable loaded from .env is removed after the test
        clean_env.setenv("RLM_DEFAULT_STRATEGY", "placeholder")
        clean_env.delenv("RLM_DEFAULT_STRATEGY")

        manager = ConfigManager(project_root=tmp_path, load_env=True)

        assert manager.default_strategy() == ChunkingStrategy.TOKEN


class TestMergeConfigs:
    """Test deep merging of configuration dictionaries."""

    def test_nested_merge(self):
        """Test that nested keys merge and later values win."""
        merged = merge_configs({"a": {"b": 1, "c": 2}, "d": 1}, {"a": {"c": 3}, "e": 4})

        assert merged == {"a": {"b": 1, "c": 3}, "d": 1, "e": 4}

    def test_inputs_are_not_modified(self):
        """Test that merging copies its inputs."""
        base = {"a": {"b": [1]}}

        merged = merge_configs(base, {})
        merged["a"]["b"].append(2)

        assert base == {"a": {"b": [1]}}
