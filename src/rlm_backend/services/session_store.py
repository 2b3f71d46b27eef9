"""
Session Store Service

JSON-file persistence for sessions. One file per session identifier lives in
the store directory: the default session in ``.rlm-session.json`` and named
sessions in ``rlm-session-<id>.json``.

There is no locking. Two processes writing the same identifier race and the
last write wins; each write is atomic, so a reader never sees a partial file.
Transient I/O failures are retried with exponential backoff.
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..core.session import Session
from ..exceptions import InvalidArgumentError, SessionStoreError
from ..utils.config.paths import ConfigPaths

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 4
RETRY_BASE_DELAY = 0.1

_SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")

# Failures that a retry cannot fix
_PERMANENT_ERRORS = (FileNotFoundError, PermissionError, IsADirectoryError, NotADirectoryError)


def is_transient_error(exc: BaseException) -> bool:
    return isinstance(exc, OSError) and not isinstance(exc, _PERMANENT_ERRORS)


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"Session file operation failed (attempt {retry_state.attempt_number}/{MAX_ATTEMPTS}): {exc}"
    )


io_retry = retry(
    stop=stop_after_attempt(MAX_ATTEMPTS),
    wait=wait_exponential(multiplier=RETRY_BASE_DELAY, max=2.0),
    retry=retry_if_exception(is_transient_error),
    before_sleep=_log_retry,
    reraise=True,
)


@io_retry
def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


@io_retry
def _write_atomic(path: Path, text: str) -> None:
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=".rlm-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(temp_name, path)
    except BaseException:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise


@io_retry
def _unlink(path: Path) -> None:
    path.unlink()


def validate_session_id(session_id: Optional[str]) -> Optional[str]:
    """
    Normalize a session identifier.

    Blank identifiers select the default session and come back as None.

    Raises:
        InvalidArgumentError: If the identifier could escape the store directory
    """
    if session_id is None or not session_id.strip():
        return None
    session_id = session_id.strip()
    if not _SESSION_ID_PATTERN.match(session_id):
        raise InvalidArgumentError(
            f"Invalid session identifier: {session_id!r}",
            argument="session",
            suggestions=["Use letters, digits, '.', '_' and '-' only, starting with a letter or digit"],
        )
    return session_id


def parse_session(text: str, source: str = "<memory>") -> Optional[Session]:
    """
    Parse a persisted session record.

    Returns:
        The session, or None when the text is not a valid session record
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Corrupted session file {source}: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning(f"Corrupted session file {source}: expected a JSON object")
        return None
    try:
        return Session.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Corrupted session file {source}: {e}")
        return None


class SessionStore:
    """
    Loads and saves sessions as JSON files in one directory.

    Example:
        >>> store = SessionStore(tmp_path)
        >>> session = store.load("research")
        >>> session.store_result("chunk_0", "summary")
        >>> store.save(session, "research")
    """

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory).expanduser()
        self.paths = ConfigPaths()

    def path_for(self, session_id: Optional[str] = None) -> Path:
        """File that holds the given session (default session when None)."""
        session_id = validate_session_id(session_id)
        if session_id is None:
            return self.directory / self.paths.DEFAULT_SESSION_FILE
        return self.directory / self.paths.NAMED_SESSION_FILE.format(session_id=session_id)

    def exists(self, session_id: Optional[str] = None) -> bool:
        return self.path_for(session_id).is_file()

    def read_file(self, path: Path) -> Optional[Session]:
        """
        Read a session file from any location.

        Returns:
            The session, or None when the file is corrupted

        Raises:
            SessionStoreError: If the file cannot be read after retries
        """
        try:
            text = _read_text(path)
        except OSError as e:
            raise SessionStoreError(
                f"Cannot read session file: {e}",
                session_path=str(path),
                suggestions=["Check file permissions of the session directory"],
            ) from e
        return parse_session(text, str(path))

    def load(self, session_id: Optional[str] = None) -> Session:
        """
        Load a session, or return a new empty one.

        A missing file gives a new session. A corrupted file is logged and
        also gives a new session; it is overwritten on the next save.

        Raises:
            InvalidArgumentError: If the session identifier is invalid
            SessionStoreError: If the file exists but cannot be read
        """
        path = self.path_for(session_id)
        if not path.is_file():
            logger.debug(f"No session file at {path}, starting a new session")
            return Session()

        session = self.read_file(path)
        if session is None:
            logger.warning(f"Starting a fresh session in place of {path}")
            return Session()

        logger.debug(f"Loaded session from {path}")
        return session

    def save(self, session: Session, session_id: Optional[str] = None) -> Path:
        """
        Write a session atomically.

        Returns:
            Path of the written file

        Raises:
            SessionStoreError: If the file cannot be written after retries
        """
        path = self.path_for(session_id)
        text = json.dumps(session.to_dict(), ensure_ascii=False, indent=2)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            _write_atomic(path, text)
        except OSError as e:
            raise SessionStoreError(
                f"Cannot write session file: {e}",
                session_path=str(path),
                suggestions=[
                    "Check that the session directory is writable",
                    "Set RLM_SESSION_DIR to a different directory",
                ],
            ) from e
        logger.debug(f"Saved session to {path}")
        return path

    def delete(self, session_id: Optional[str] = None) -> bool:
        """
        Remove a session file.

        Returns:
            True if a file was removed
        """
        path = self.path_for(session_id)
        if not path.is_file():
            return False
        try:
            _unlink(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise SessionStoreError(f"Cannot delete session file: {e}", session_path=str(path)) from e
        logger.info(f"Deleted session file {path}")
        return True

    def session_files(self) -> List[Path]:
        """Every session file in the store directory, default session first."""
        if not self.directory.is_dir():
            return []
        files = []
        default = self.directory / self.paths.DEFAULT_SESSION_FILE
        if default.is_file():
            files.append(default)
        files.extend(sorted(p for p in self.directory.glob(self.paths.NAMED_SESSION_GLOB) if p.is_file()))
        return files

    def list_sessions(self) -> List[str]:
        """Identifiers of the named sessions in the store directory."""
        prefix, suffix = self.paths.NAMED_SESSION_FILE.split("{session_id}")
        return [
            p.name[len(prefix):len(p.name) - len(suffix)]
            for p in self.session_files()
            if p.name.startswith(prefix)
        ]

    def delete_all(self) -> int:
        """
        Remove every session file in the store directory.

        Returns:
            Number of files removed
        """
        removed = 0
        for path in self.session_files():
            try:
                _unlink(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                raise SessionStoreError(f"Cannot delete session file: {e}", session_path=str(path)) from e
            removed += 1
        logger.info(f"Deleted {removed} session file(s) from {self.directory}")
        return removed
