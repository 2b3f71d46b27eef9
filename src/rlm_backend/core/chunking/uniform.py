"""
Uniform Chunker Module

Fixed-stride sliding window over the document characters.
"""

import math
import logging
from typing import Iterator, Optional

from ..documents import Document
from .base import BaseChunker, require_positive, require_non_negative
from .cancellation import CancellationToken, check_cancelled
from .chunk import ContentChunk

logger = logging.getLogger(__name__)


class UniformChunker(BaseChunker):
    """
    Split a document into equal windows with optional overlap.

    Windows start at 0 and advance by chunk_size - overlap, floored at one
    character so that an overlap at or above the window size still
    terminates. Windows keep sliding until their start passes the end of the
    document, so with overlap the last windows are shorter tails that lie
    inside the overlap of the window before them.

    The totalChunks metadata is ceil((length - overlap) / step), at least 1.
    With overlap it can be smaller than the number of windows emitted; the
    session counts its buffer instead.

    Example:
        >>> chunker = UniformChunker(chunk_size=100)
        >>> doc = Document.from_text("doc", "x" * 250)
        >>> [c.length for c in chunker.chunk(doc)]
        [100, 100, 50]
    """

    strategy_name = "uniform"

    def __init__(self, chunk_size: int, overlap: int = 0) -> None:
        """
        Initialize the uniform chunker.

        Args:
            chunk_size: Window size in characters
            overlap: Characters shared by consecutive windows

        Raises:
            InvalidArgumentError: If chunk_size <= 0 or overlap < 0
        """
        require_positive(chunk_size, "chunk_size")
        require_non_negative(overlap, "overlap")

        self.chunk_size = chunk_size
        self.overlap = overlap
        self.step = max(1, chunk_size - overlap)

    def total_chunks(self, length: int) -> int:
        """Value of the totalChunks metadata for a document of the given length."""
        if length <= self.chunk_size:
            return 1
        return max(1, math.ceil((length - self.overlap) / self.step))

    def chunk(
        self,
        document: Document,
        cancel_token: Optional[CancellationToken] = None
    ) -> Iterator[ContentChunk]:
        content = document.content
        length = len(content)
        total = self.total_chunks(length)

        logger.debug(f"Uniform chunking: length={length}, chunk_size={self.chunk_size}, step={self.step}, total={total}")

        position = 0
        index = 0
        while position < length:
            check_cancelled(cancel_token, index)

            end = min(position + self.chunk_size, length)
            yield ContentChunk(
                index=index,
                content=content[position:end],
                start_position=position,
                end_position=end,
                metadata={
                    "documentId": document.id,
                    "totalChunks": str(total),
                    "strategy": self.strategy_name,
                },
            )
            index += 1
            position += self.step
