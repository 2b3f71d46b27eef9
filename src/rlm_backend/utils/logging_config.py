"""
Logging configuration for the RLM backend.

Console output always goes to stderr through rich, so that stdout stays
reserved for chunk text and JSON. A log file can be added next to it, in
plain text or as one JSON object per line for later analysis of chunking
runs.

Components:
- LogLevel / LogFormat: Names accepted by the configuration file and CLI
- JSONFormatter: One JSON object per record, extras included
- LoggingManager: Installs the console and file handlers on the root logger
"""

import json
import logging
import logging.handlers
import re
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(Enum):
    """Log levels that can be named in configuration."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Resolve a level name such as 'info' or 'WARNING'."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {name}") from None


class LogFormat(Enum):
    """Layouts for the log file."""
    STANDARD = "standard"
    JSON = "json"
    DETAILED = "detailed"


FILE_LAYOUTS = {
    LogFormat.STANDARD: "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    LogFormat.DETAILED: "%(asctime)s %(levelname)-8s %(name)s [%(filename)s:%(lineno)d %(funcName)s] %(message)s",
}

# Everything a bare LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

_SIZE_RE = re.compile(r"^(\d+)\s*([KMG]B)?$")
_SIZE_FACTORS = {None: 1, "KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3}


class JSONFormatter(logging.Formatter):
    """
    Renders a record as a single-line JSON object.

    Values passed with ``extra=`` (for example ``chunk_index`` or
    ``strategy``) become top-level keys next to the message.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.lineno}",
        }
        for key, value in vars(record).items():
            if key in _RECORD_ATTRS or key.startswith("_") or callable(value):
                continue
            entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def parse_file_size(size: str) -> int:
    """
    Convert a size such as '10MB' into bytes.

    Raises:
        ValueError: If the size cannot be parsed
    """
    match = _SIZE_RE.match(size.strip().upper())
    if not match:
        raise ValueError(f"Invalid file size: {size}")
    return int(match.group(1)) * _SIZE_FACTORS[match.group(2)]


def rich_console_handler(console: Optional[Console] = None) -> logging.Handler:
    """Build the stderr handler used for interactive runs."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    return handler


class LoggingManager:
    """
    Replaces the root logger's handlers with a console handler and an
    optional log file.

    Args:
        log_level: Threshold for the root logger and every handler
        log_format: Layout of the log file
        log_file: File that receives records in addition to the console
        enable_console: Install a console handler at all
        enable_rotation: Rotate the log file at max_file_size
        max_file_size: Rotation size such as '10MB'
        backup_count: Rotated files to keep
        console_handler: Handler to use instead of a new rich handler
    """

    def __init__(
        self,
        log_level: LogLevel = LogLevel.INFO,
        log_format: LogFormat = LogFormat.STANDARD,
        log_file: Optional[Union[str, Path]] = None,
        enable_console: bool = True,
        enable_rotation: bool = False,
        max_file_size: str = "10MB",
        backup_count: int = 5,
        console_handler: Optional[logging.Handler] = None,
    ):
        self.log_level = log_level
        self.log_format = log_format
        self.log_file = Path(log_file).expanduser() if log_file else None
        self.enable_rotation = enable_rotation
        self.max_bytes = parse_file_size(max_file_size)
        self.backup_count = backup_count

        handlers = []
        if enable_console:
            handlers.append(console_handler or rich_console_handler())
        if self.log_file:
            handlers.append(self._file_handler())
        self._install(handlers)

    def _install(self, handlers) -> None:
        root = logging.getLogger()
        for old in list(root.handlers):
            root.removeHandler(old)
            old.close()
        root.setLevel(self.log_level.value)
        for handler in handlers:
            handler.setLevel(self.log_level.value)
            root.addHandler(handler)

    def _file_handler(self) -> logging.Handler:
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        if self.enable_rotation:
            handler: logging.Handler = logging.handlers.RotatingFileHandler(
                self.log_file,
                maxBytes=self.max_bytes,
                backupCount=self.backup_count,
                encoding="utf-8",
            )
        else:
            handler = logging.FileHandler(self.log_file, encoding="utf-8")

        if self.log_format is LogFormat.JSON:
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(logging.Formatter(FILE_LAYOUTS[self.log_format]))
        return handler

    def get_logger(self, name: str) -> logging.Logger:
        """Return a logger at the configured level."""
        logger = logging.getLogger(name)
        logger.setLevel(self.log_level.value)
        return logger
