"""
Documents Package

Value types for documents handed to the chunking engine. Format-specific
readers live outside the core.
"""

from .document import Document, DocumentMetadata

__all__ = [
    "Document",
    "DocumentMetadata",
]
