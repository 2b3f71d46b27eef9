"""
Core modules for the RLM backend.

This package contains the chunking engine, the document value types and the
session model. The core never performs file I/O.
"""

from .documents import Document, DocumentMetadata

from .chunking import (
    ContentChunk,
    ChunkingOptions,
    ChunkingStrategy,
    CancellationToken,
    create_chunker,
    run_chunking,
)

from .session import Session, ResultBuffer, aggregate_results

__all__ = [
    "Document",
    "DocumentMetadata",
    "ContentChunk",
    "ChunkingOptions",
    "ChunkingStrategy",
    "CancellationToken",
    "create_chunker",
    "run_chunking",
    "Session",
    "ResultBuffer",
    "aggregate_results",
]
