"""
Tests for logging configuration.
"""

import json
import logging
import logging.handlers

import pytest
from rich.logging import RichHandler

from rlm_backend.utils import JSONFormatter, LogFormat, LoggingManager, LogLevel
from rlm_backend.utils.logging_config import parse_file_size


def flush_root_handlers():
    for handler in logging.getLogger().handlers:
        handler.flush()


class TestLogLevelAndSizes:
    """Test level names and file size parsing."""

    def test_level_from_name(self):
        """Test case-insensitive level names."""
        assert LogLevel.from_name("info") == LogLevel.INFO
        assert LogLevel.from_name(" WARNING ") == LogLevel.WARNING

    def test_unknown_level(self):
        """Test that unknown names raise ValueError."""
        with pytest.raises(ValueError):
            LogLevel.from_name("loud")

    @pytest.mark.parametrize("size,expected", [("512", 512), ("2KB", 2048), ("10MB", 10 * 1024 ** 2), ("1gb", 1024 ** 3)])
    def test_parse_file_size(self, size, expected):
        """Test size suffixes."""
        assert parse_file_size(size) == expected


class TestJSONFormatter:
    """Test machine-readable log records."""

    def test_format_with_extra_fields(self):
        """Test that the message and extras end up in one JSON object."""
        record = logging.LogRecord("rlm_backend.test", logging.INFO, __file__, 10, "hello %s", ("world",), None)
        record.chunk_index = 3

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "hello world"
        assert data["level"] == "INFO"
        assert data["logger"] == "rlm_backend.test"
        assert data["chunk_index"] == 3
        assert "args" not in data


class TestLoggingManager:
    """Test root logger setup."""

    def test_file_logging_in_json(self, tmp_path, restore_root_logging):
        """Test that records reach a JSON log file in a created directory."""
        log_file = tmp_path / "logs" / "rlm.log"
        manager = LoggingManager(
            log_level=LogLevel.INFO,
            log_format=LogFormat.JSON,
            log_file=log_file,
            enable_console=False,
        )

        manager.get_logger("rlm_backend.test").info("chunked document")
        flush_root_handlers()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert json.loads(lines[-1])["message"] == "chunked document"

    def test_level_filters_records(self, tmp_path, restore_root_logging):
        """Test that records below the configured level are dropped."""
        log_file = tmp_path / "rlm.log"
        LoggingManager(log_level=LogLevel.WARNING, log_file=log_file, enable_console=False)

        logging.getLogger("rlm_backend.filtered").info("hidden")
        logging.getLogger("rlm_backend.filtered").warning("shown")
        flush_root_handlers()

        text = log_file.read_text(encoding="utf-8")
        assert "shown" in text
        assert "hidden" not in text

    def test_rotation(self, tmp_path, restore_root_logging):
        """Test that rotation installs a rotating file handler."""
        LoggingManager(log_file=tmp_path / "rlm.log", enable_console=False, enable_rotation=True, max_file_size="1KB")

        handlers = logging.getLogger().handlers
        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in handlers)

    def test_custom_console_handler(self, restore_root_logging):
        """Test that a supplied console handler replaces the default one."""
        console = logging.NullHandler()

        LoggingManager(log_level=LogLevel.DEBUG, console_handler=console)

        root = logging.getLogger()
        assert root.handlers == [console]
        assert console.level == logging.DEBUG
        assert root.level == logging.DEBUG

    def test_default_console_is_rich_on_stderr(self, restore_root_logging):
        """Test that the default console handler writes through rich to stderr."""
        LoggingManager(log_level=LogLevel.INFO)

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RichHandler)
        assert handlers[0].console.stderr
