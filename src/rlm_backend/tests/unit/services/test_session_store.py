"""
Tests for JSON-file session persistence.
"""

import json
import os
from unittest.mock import patch

import pytest

from rlm_backend.core.chunking import ContentChunk
from rlm_backend.core.documents import Document
from rlm_backend.core.session import Session
from rlm_backend.exceptions import InvalidArgumentError, SessionStoreError
from rlm_backend.services import SessionStore, validate_session_id
from rlm_backend.services.session_store import MAX_ATTEMPTS, is_transient_error, parse_session


@pytest.fixture
def store(tmp_path):
    return SessionStore(tmp_path / "sessions")


@pytest.fixture
def loaded_session():
    session = Session()
    session.load_document(Document.from_text("doc.md", "# Title\n\nBody"))
    session.set_chunks([ContentChunk(0, "# Title", 0, 7, {"strategy": "semantic"})])
    session.store_result("chunk_0", "title")
    return session


class TestSessionIds:
    """Test identifier validation and file naming."""

    def test_blank_means_default(self):
        """Test that missing or blank identifiers select the default session."""
        assert validate_session_id(None) is None
        assert validate_session_id("  ") is None

    def test_valid_identifier(self):
        """Test that ordinary identifiers pass through stripped."""
        assert validate_session_id(" research-1.a_b ") == "research-1.a_b"

    @pytest.mark.parametrize("session_id", ["../escape", "a/b", "-leading", ".hidden", "with space"])
    def test_invalid_identifiers(self, session_id):
        """Test that identifiers that could leave the directory are rejected."""
        with pytest.raises(InvalidArgumentError):
            validate_session_id(session_id)

    def test_file_names(self, store):
        """Test the default and named session file names."""
        assert store.path_for().name == ".rlm-session.json"
        assert store.path_for("research").name == "rlm-session-research.json"


class TestSessionStore:
    """Test loading, saving and deleting sessions."""

    def test_missing_file_gives_new_session(self, store):
        """Test that loading a session that was never saved gives an empty one."""
        assert store.load("nothing") == Session()

    def test_save_and_load(self, store, loaded_session):
        """Test that a saved session loads back unchanged."""
        path = store.save(loaded_session, "research")

        assert path.is_file()
        assert store.exists("research")
        assert store.load("research") == loaded_session

    def test_saved_file_is_camel_case_json(self, store, loaded_session):
        """Test the persisted record shape."""
        path = store.save(loaded_session)

        data = json.loads(path.read_text(encoding="utf-8"))

        assert data["content"] == "# Title\n\nBody"
        assert data["chunkBuffer"][0]["startPosition"] == 0
        assert data["results"] == {"chunk_0": "title"}
        assert data["recursionDepth"] == 0

    def test_sessions_are_isolated(self, store, loaded_session):
        """Test that named sessions and the default session do not share state."""
        store.save(loaded_session, "a")

        assert store.load() == Session()
        assert store.load("b") == Session()

    @pytest.mark.parametrize("text", ["{not json", "[1, 2]", '{"chunkBuffer": [{"index": -1}]}'])
    def test_corrupted_file_gives_new_session(self, store, text):
        """Test that an unreadable record is replaced by a fresh session."""
        store.directory.mkdir(parents=True)
        store.path_for("bad").write_text(text, encoding="utf-8")

        assert store.load("bad") == Session()

    def test_no_temp_files_left(self, store, loaded_session):
        """Test that atomic writes clean up after themselves."""
        store.save(loaded_session, "one")
        store.save(loaded_session, "one")

        assert [p.name for p in store.directory.iterdir()] == ["rlm-session-one.json"]

    def test_delete(self, store, loaded_session):
        """Test removing a single session file."""
        store.save(loaded_session, "one")

        assert store.delete("one")
        assert not store.delete("one")
        assert not store.exists("one")

    def test_list_and_delete_all(self, store, loaded_session):
        """Test listing named sessions and removing every session file."""
        store.save(loaded_session)
        store.save(loaded_session, "b")
        store.save(loaded_session, "a")

        assert store.list_sessions() == ["a", "b"]
        assert store.session_files()[0].name == ".rlm-session.json"
        assert store.delete_all() == 3
        assert store.session_files() == []

    def test_delete_all_without_directory(self, tmp_path):
        """Test that a store whose directory does not exist has nothing to delete."""
        assert SessionStore(tmp_path / "missing").delete_all() == 0


class TestSessionStoreRetries:
    """Test retrying of transient I/O failures."""

    def test_transient_error_classification(self):
        """Test which OS errors are worth retrying."""
        assert is_transient_error(OSError("busy"))
        assert not is_transient_error(FileNotFoundError("gone"))
        assert not is_transient_error(PermissionError("denied"))
        assert not is_transient_error(ValueError("bad"))

    def test_transient_write_failure_is_retried(self, store, loaded_session):
        """Test that a failed replace is retried and the save succeeds."""
        real_replace = os.replace
        calls = []

        def flaky_replace(src, dst):
            calls.append(dst)
            if len(calls) == 1:
                raise OSError("resource busy")
            return real_replace(src, dst)

        with patch("rlm_backend.services.session_store.os.replace", side_effect=flaky_replace):
            path = store.save(loaded_session, "flaky")

        assert len(calls) == 2
        assert store.load("flaky") == loaded_session
        assert [p.name for p in store.directory.iterdir()] == [path.name]

    def test_persistent_write_failure(self, store, loaded_session):
        """Test that a failure on every attempt becomes a SessionStoreError."""
        with patch("rlm_backend.services.session_store.os.replace", side_effect=OSError("disk error")) as mock_replace:
            with pytest.raises(SessionStoreError) as exc_info:
                store.save(loaded_session, "broken")

        assert mock_replace.call_count == MAX_ATTEMPTS
        assert exc_info.value.session_path.endswith("rlm-session-broken.json")
        assert not any(store.directory.iterdir())

    def test_permission_error_is_not_retried(self, store, loaded_session):
        """Test that permanent failures are reported after one attempt."""
        with patch("rlm_backend.services.session_store.os.replace", side_effect=PermissionError("denied")) as mock_replace:
            with pytest.raises(SessionStoreError):
                store.save(loaded_session, "locked")

        assert mock_replace.call_count == 1


class TestParseSession:
    """Test parsing of raw session records."""

    def test_valid_record(self):
        """Test that a minimal record parses."""
        session = parse_session('{"results": {"a": "b"}}')

        assert session.results == {"a": "b"}

    def test_invalid_record(self):
        """Test that garbage gives None rather than an exception."""
        assert parse_session("garbage") is None
