"""
Session Model Module

Persisted processing state for one logical thread of work: the loaded
document, its chunk buffer and pointer, accumulated results and the
recursion depth of nested decomposition.

The session never touches the filesystem. A store loads it, the caller
mutates it once, and the store saves it again.

Lifecycle:
    Empty -> Loaded (load_document) -> Chunked (set_chunks)
          -> Iterating (advance/skip/jump, results stored) -> Cleared (clear)
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple

from ..chunking import ContentChunk
from ..documents import Document, DocumentMetadata
from ...exceptions import PreconditionNotMetError
from .navigation import resolve_jump_target
from .result_buffer import ResultBuffer

logger = logging.getLogger(__name__)

MAX_RECURSION_DEPTH = 5
DEFAULT_SKIP_MIN_LENGTH = 100
DEFAULT_DOCUMENT_ID = "session"


def child_session_id(parent_id: Optional[str], branch: str) -> str:
    """
    Name of a child session spawned from a parent.

    Parent and child are related only by this naming convention; the tree
    of sessions is never held in memory.

    Example:
        >>> child_session_id("research", "1")
        'research-child-1'
    """
    return f"{parent_id or DEFAULT_DOCUMENT_ID}-child-{branch}"


@dataclass
class SessionProgress:
    """Progress through the chunk buffer."""
    current_chunk: int
    total_chunks: int
    remaining_chunks: int
    processed_chars: int
    total_chars: int
    average_chunk_size: int
    remaining_token_estimate: int
    result_count: int

    @property
    def percent_complete(self) -> float:
        if self.total_chunks == 0:
            return 0.0
        return self.current_chunk / self.total_chunks * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentChunk": self.current_chunk,
            "totalChunks": self.total_chunks,
            "remainingChunks": self.remaining_chunks,
            "processedChars": self.processed_chars,
            "totalChars": self.total_chars,
            "averageChunkSize": self.average_chunk_size,
            "remainingTokenEstimate": self.remaining_token_estimate,
            "resultCount": self.result_count,
            "progressPercent": round(self.percent_complete, 1),
        }


@dataclass
class Session:
    """
    State of one processing session.

    Attributes:
        content: Loaded document text, None when nothing is loaded
        metadata: Metadata of the loaded document
        chunk_buffer: Chunks of the last chunking run, replaced wholesale
        current_index: Pointer into chunk_buffer
        results: Stored results, keyed by chunk or branch name
        recursion_depth: Nesting level in a delegation tree (0..MAX_RECURSION_DEPTH)
    """
    content: Optional[str] = None
    metadata: Optional[DocumentMetadata] = None
    chunk_buffer: List[ContentChunk] = field(default_factory=list)
    current_index: int = 0
    results: Dict[str, str] = field(default_factory=dict)
    recursion_depth: int = 0

    max_recursion_depth = MAX_RECURSION_DEPTH

    # State queries

    @property
    def has_document(self) -> bool:
        return self.content is not None

    @property
    def has_chunks(self) -> bool:
        return len(self.chunk_buffer) > 0

    @property
    def has_more_chunks(self) -> bool:
        return self.current_index < len(self.chunk_buffer) - 1

    @property
    def current_chunk(self) -> Optional[ContentChunk]:
        if 0 <= self.current_index < len(self.chunk_buffer):
            return self.chunk_buffer[self.current_index]
        return None

    @property
    def remaining_chunks(self) -> int:
        return max(0, len(self.chunk_buffer) - self.current_index - 1)

    def require_document(self) -> None:
        """Raise PreconditionNotMetError when no document is loaded."""
        if not self.has_document:
            raise PreconditionNotMetError(
                "No document loaded",
                suggestions=["Load a document first with: rlm load <file>"],
            )

    def require_chunks(self) -> None:
        """Raise PreconditionNotMetError when the chunk buffer is empty."""
        if not self.has_chunks:
            raise PreconditionNotMetError(
                "No chunks available",
                suggestions=["Chunk the loaded document first with: rlm chunk"],
            )

    # Document and chunk buffer

    def load_document(self, document: Document) -> None:
        """
        Load a document, discarding any chunk buffer.

        Results and recursion depth are kept; only chunking state is tied to
        the document.
        """
        if self.has_chunks:
            logger.debug(f"Discarding {len(self.chunk_buffer)} chunk(s) from the previous document")
        self.content = document.content
        self.metadata = document.metadata
        self.chunk_buffer = []
        self.current_index = 0

    def to_document(self) -> Document:
        """
        Rebuild the loaded document for chunking.

        Raises:
            PreconditionNotMetError: If no document is loaded
        """
        self.require_document()
        metadata = self.metadata or DocumentMetadata.from_content("memory", self.content)
        return Document(
            id=self.metadata.source if self.metadata and self.metadata.source else DEFAULT_DOCUMENT_ID,
            content=self.content,
            metadata=metadata,
        )

    def set_chunks(self, chunks: List[ContentChunk]) -> None:
        """Replace the chunk buffer and reset the pointer to the first chunk."""
        self.chunk_buffer = list(chunks)
        self.current_index = 0
        logger.debug(f"Chunk buffer replaced with {len(self.chunk_buffer)} chunk(s)")

    # Navigation

    def advance(self) -> Optional[ContentChunk]:
        """
        Move to the next chunk.

        Returns:
            The new current chunk, or None when already on the last chunk

        Raises:
            PreconditionNotMetError: If there are no chunks
        """
        self.require_chunks()
        if not self.has_more_chunks:
            return None
        self.current_index += 1
        return self.current_chunk

    def skip(self, count: int, skip_empty: bool = False, min_length: int = DEFAULT_SKIP_MIN_LENGTH) -> int:
        """
        Move the pointer by count positions.

        Args:
            count: Positions to move; negative moves backwards
            skip_empty: Keep moving past chunks shorter than min_length
            min_length: Length below which a chunk counts as empty

        Returns:
            Number of positions actually moved (negative when moving back)

        Raises:
            PreconditionNotMetError: If there are no chunks
        """
        self.require_chunks()
        previous = self.current_index
        total = len(self.chunk_buffer)
        target = previous + count

        if skip_empty and count != 0:
            direction = 1 if count > 0 else -1
            while 0 <= target < total and len(self.chunk_buffer[target].content) < min_length:
                target += direction

        self.current_index = min(max(target, 0), total - 1)
        return self.current_index - previous

    def jump(self, target: str) -> ContentChunk:
        """
        Move to a 1-based chunk number or a percentage such as "50%".

        Raises:
            PreconditionNotMetError: If there are no chunks
            InvalidArgumentError: If the target is malformed
        """
        self.require_chunks()
        self.current_index = resolve_jump_target(target, len(self.chunk_buffer))
        return self.current_chunk

    def progress(self) -> SessionProgress:
        """Summarize progress through the chunk buffer."""
        total_chunks = len(self.chunk_buffer)
        processed = min(self.current_index + 1, total_chunks)
        total_chars = sum(c.length for c in self.chunk_buffer)
        return SessionProgress(
            current_chunk=processed,
            total_chunks=total_chunks,
            remaining_chunks=total_chunks - processed,
            processed_chars=sum(c.length for c in self.chunk_buffer[:processed]),
            total_chars=total_chars,
            average_chunk_size=total_chars // total_chunks if total_chunks else 0,
            remaining_token_estimate=sum(c.token_estimate for c in self.chunk_buffer[processed:]),
            result_count=len(self.results),
        )

    # Results

    def result_buffer(self) -> ResultBuffer:
        """ResultBuffer that writes through to this session's results."""
        return ResultBuffer(self.results)

    def store_result(self, key: str, value: str) -> None:
        self.result_buffer().store(key, value)

    # Recursion depth

    def increment_recursion_depth(self) -> bool:
        """
        Enter one more level of nested decomposition.

        The depth is always incremented. The return value tells the caller
        whether the limit is now exceeded, so it can process the remaining
        work inline instead of delegating further.

        Returns:
            True if the depth is now above max_recursion_depth
        """
        self.recursion_depth += 1
        exceeded = self.recursion_depth > self.max_recursion_depth
        if exceeded:
            logger.warning(
                f"Recursion depth {self.recursion_depth} exceeds maximum {self.max_recursion_depth}"
            )
        return exceeded

    def decrement_recursion_depth(self) -> None:
        """Leave one level of nesting; the depth never goes below zero."""
        if self.recursion_depth > 0:
            self.recursion_depth -= 1

    def spawn_child(self) -> Tuple['Session', bool]:
        """
        Create a child session for the current chunk.

        The child holds the current chunk as its document and starts one
        level deeper than this session. Storing it under
        child_session_id() is the caller's job.

        Returns:
            (child, exceeded) where exceeded is True when the child's depth
            is above the maximum

        Raises:
            PreconditionNotMetError: If there is no current chunk
        """
        self.require_chunks()
        chunk = self.current_chunk
        parent_source = self.metadata.source if self.metadata else DEFAULT_DOCUMENT_ID

        child = Session(recursion_depth=self.recursion_depth)
        metadata = DocumentMetadata.from_content(f"{parent_source}#chunk-{chunk.index + 1}", chunk.content)
        metadata.extended = {"parentChunkIndex": str(chunk.index), "parentSource": parent_source}
        child.load_document(Document(id=metadata.source, content=chunk.content, metadata=metadata))

        exceeded = child.increment_recursion_depth()
        return child, exceeded

    def clear(self) -> None:
        """Reset every field to its default, including recursion depth."""
        self.content = None
        self.metadata = None
        self.chunk_buffer = []
        self.current_index = 0
        self.results = {}
        self.recursion_depth = 0

    # Persistence

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted session record (camelCase keys)."""
        data: Dict[str, Any] = {
            "chunkBuffer": [chunk.to_dict() for chunk in self.chunk_buffer],
            "currentIndex": self.current_index,
            "results": dict(self.results),
            "recursionDepth": self.recursion_depth,
        }
        if self.content is not None:
            data["content"] = self.content
        if self.metadata is not None:
            data["metadata"] = self.metadata.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Session':
        """Create a session from a persisted record."""
        chunks = [ContentChunk.from_dict(c) for c in data.get("chunkBuffer") or []]
        metadata = data.get("metadata")
        session = cls(
            content=data.get("content"),
            metadata=DocumentMetadata.from_dict(metadata) if metadata else None,
            chunk_buffer=chunks,
            current_index=int(data.get("currentIndex", 0)),
            results={str(k): str(v) for k, v in (data.get("results") or {}).items()},
            recursion_depth=max(0, int(data.get("recursionDepth", 0))),
        )
        if chunks and not 0 <= session.current_index < len(chunks):
            logger.warning(f"Stored chunk index {session.current_index} out of range, resetting to 0")
            session.current_index = 0
        return session
