"""
Services package for the RLM backend.

Collaborators around the core that touch the filesystem: document loading,
session persistence and result import.
"""

from .document_loader import load_document, merge_documents, STDIN_SOURCE
from .session_store import SessionStore, validate_session_id
from .result_import import ImportReport, import_results

__all__ = [
    "load_document",
    "merge_documents",
    "STDIN_SOURCE",
    "SessionStore",
    "validate_session_id",
    "ImportReport",
    "import_results",
]
