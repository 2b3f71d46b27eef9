"""
Content Chunk Module

Contains the ContentChunk class, the unit every chunking strategy emits and
every session buffer stores.

Components:
- ContentChunk: Immutable chunk with position and string metadata
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentChunk:
    """
    One bounded segment of a document.

    Chunks are immutable. Enrichment produces a new chunk through
    with_metadata() so that a chunk already handed to a consumer is never
    mutated behind its back.

    Attributes:
        index: Position of the chunk in its run (0-based, strictly sequential)
        content: Text of the chunk
        start_position: Character offset of the first character in the source
        end_position: Character offset one past the last character
        metadata: String metadata, always including "strategy" and "documentId"

    Example:
        >>> chunk = ContentChunk(0, "hello", 0, 5, {"strategy": "uniform"})
        >>> chunk.length
        5
        >>> chunk.with_metadata(wordCount="1").metadata["wordCount"]
        '1'
    """

    index: int
    content: str
    start_position: int
    end_position: int
    metadata: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """
        Validate positions.

        Raises:
            ValueError: If the index is negative or positions are inverted
        """
        if self.index < 0:
            raise ValueError(f"index cannot be negative: {self.index}")

        if self.end_position < self.start_position:
            raise ValueError(
                f"end_position ({self.end_position}) cannot be less than "
                f"start_position ({self.start_position})"
            )

    @property
    def length(self) -> int:
        return len(self.content)

    @property
    def token_estimate(self) -> int:
        """Rough token count using four characters per token."""
        return len(self.content) // 4

    def with_metadata(self, **values: Any) -> 'ContentChunk':
        """
        Return a copy with additional metadata entries.

        Values are converted to strings; existing keys are overwritten.
        """
        merged = dict(self.metadata)
        merged.update({key: str(value) for key, value in values.items()})
        return replace(self, metadata=merged)

    def to_dict(self) -> Dict[str, Any]:
        """Convert chunk to the persisted JSON shape."""
        return {
            "index": self.index,
            "content": self.content,
            "startPosition": self.start_position,
            "endPosition": self.end_position,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContentChunk':
        """Create a chunk from a dictionary produced by to_dict()."""
        return cls(
            index=int(data.get("index", 0)),
            content=data.get("content", ""),
            start_position=int(data.get("startPosition", 0)),
            end_position=int(data.get("endPosition", 0)),
            metadata={str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
        )

    def get_preview(self, max_length: int = 80) -> str:
        """Single-line preview of the content for display."""
        flattened = " ".join(self.content.split())
        if len(flattened) <= max_length:
            return flattened
        return flattened[:max_length - 3] + "..."
