"""
Result Import Service

Bulk import of results into a session from files matching a glob pattern.
Plain files contribute their text under their file stem. Session files
contribute their combined results: a named session (``rlm-session-<id>.json``)
under its identifier, the default session (``.rlm-session.json``) under
"session". This is how results of delegated work are gathered back into the
parent.

Importing the same files twice overwrites the same keys.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..core.session import Session, aggregate_results
from ..utils.config.paths import ConfigPaths
from .session_store import SessionStore

logger = logging.getLogger(__name__)

_PATHS = ConfigPaths()
SESSION_FILE_PREFIX, SESSION_FILE_SUFFIX = _PATHS.NAMED_SESSION_FILE.split("{session_id}")
DEFAULT_SESSION_KEY = "session"


@dataclass
class ImportReport:
    """Outcome of one import run."""
    imported: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    directory: Optional[Path] = None

    @property
    def imported_count(self) -> int:
        return len(self.imported)


def session_file_key(name: str) -> Optional[str]:
    """Result key for a session file name, or None for any other file."""
    if name == _PATHS.DEFAULT_SESSION_FILE:
        return DEFAULT_SESSION_KEY
    if name.startswith(SESSION_FILE_PREFIX) and name.endswith(SESSION_FILE_SUFFIX):
        return name[len(SESSION_FILE_PREFIX):-len(SESSION_FILE_SUFFIX)]
    return None


def is_session_file(name: str) -> bool:
    return session_file_key(name) is not None


def resolve_pattern(
    pattern: str,
    base_dir: Path,
    store: Optional[SessionStore] = None
) -> Tuple[Path, str]:
    """
    Split a glob pattern into a directory and a file pattern.

    Session-file patterns without a directory are looked up in the session
    store directory when the working directory has no match.
    """
    pattern_path = Path(pattern).expanduser()
    full_path = pattern_path if pattern_path.is_absolute() else base_dir / pattern_path
    directory, file_pattern = full_path.parent, full_path.name
    if not directory.is_dir():
        directory, file_pattern = base_dir, pattern

    if (
        store is not None
        and directory == base_dir
        and file_pattern.startswith((SESSION_FILE_PREFIX, ".rlm-session"))
        and not any(directory.glob(file_pattern))
        and store.directory.is_dir()
        and any(store.directory.glob(file_pattern))
    ):
        logger.info(f"Found session files in {store.directory}")
        directory = store.directory

    return directory, file_pattern


def import_results(
    session: Session,
    pattern: str,
    store: Optional[SessionStore] = None,
    base_dir: Optional[Union[str, Path]] = None
) -> ImportReport:
    """
    Import result files into a session.

    Args:
        session: Session receiving the results
        pattern: Glob pattern such as "results/*.txt" or "rlm-session-*-child-*.json"
        store: Session store used to read child session files
        base_dir: Directory relative patterns resolve against (default: cwd)

    Returns:
        ImportReport listing imported and skipped keys
    """
    base = Path(base_dir) if base_dir is not None else Path.cwd()
    store = store or SessionStore(base)
    directory, file_pattern = resolve_pattern(pattern, base, store)
    report = ImportReport(directory=directory)

    files = sorted(p for p in directory.glob(file_pattern) if p.is_file())
    if not files:
        logger.info(f"No files found matching {pattern}")
        return report

    for path in files:
        key = session_file_key(path.name)
        if key is not None:
            child = store.read_file(path)
            if child is None or not child.results:
                logger.warning(f"Session file {path.name} has no results, skipping")
                report.skipped.append(key)
                continue
            value = aggregate_results(child).combined
        else:
            key = path.stem
            try:
                value = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Failed to read {path.name}: {e}")
                report.skipped.append(key)
                continue

        session.store_result(key, value)
        report.imported.append(key)

    logger.info(f"Imported {report.imported_count} result(s) from {directory}")
    return report
