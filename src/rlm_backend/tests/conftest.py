"""Shared test fixtures and configuration for RLM backend tests."""

import logging
from pathlib import Path
from types import SimpleNamespace
from typing import List

import pytest

from rlm_backend.core.documents import Document

RLM_ENV_VARS = (
    "RLM_SESSION_DIR",
    "RLM_LOG_LEVEL",
    "RLM_LOG_FILE",
    "RLM_DEFAULT_STRATEGY",
    "RLM_TOKEN_ENCODING",
    "RLM_MAX_TOKENS",
)

MARKDOWN_GUIDE = (
    "# Guide\n\n"
    "Intro text.\n\n"
    "## Install\n\n"
    "Run the installer.\n\n"
    "## Usage\n\n"
    "Call the tool.\n\n"
    "### Options\n\n"
    "Flags explained.\n"
)


class CharTokenizer:
    """One token per character, so token windows are easy to reason about."""

    def encode(self, text: str) -> List[int]:
        return [ord(c) for c in text]

    def decode(self, tokens: List[int]) -> str:
        return "".join(chr(t) for t in tokens)


@pytest.fixture
def char_tokenizer() -> CharTokenizer:
    return CharTokenizer()


@pytest.fixture
def markdown_document() -> Document:
    """Small Markdown document with three header levels."""
    return Document.from_text("guide.md", MARKDOWN_GUIDE)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove RLM_* variables so tests see the built-in defaults."""
    for var in RLM_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def restore_root_logging():
    """Put the root logger back the way it was; the CLI reconfigures it."""
    root = logging.getLogger()
    package_logger = logging.getLogger("rlm_backend")
    handlers = list(root.handlers)
    level = root.level
    package_level = package_logger.level

    yield

    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    package_logger.setLevel(package_level)


@pytest.fixture
def cli_env(tmp_path: Path, clean_env, restore_root_logging):
    """
    Isolated working directory and session directory for CLI runs.

    Returns:
        Namespace with work_dir (the cwd) and session_dir (RLM_SESSION_DIR)
    """
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    session_dir = tmp_path / "sessions"

    clean_env.chdir(work_dir)
    clean_env.setenv("RLM_SESSION_DIR", str(session_dir))

    return SimpleNamespace(work_dir=work_dir, session_dir=session_dir)
