"""
Recursive Chunker Module

Splits oversized documents along a fixed hierarchy of separators, from
Markdown headers down to single spaces, and force-splits whatever is left.
"""

import logging
from typing import Iterator, List, Optional, Tuple

from ..documents import Document
from .base import BaseChunker, require_positive, require_non_negative
from .cancellation import CancellationToken, check_cancelled
from .chunk import ContentChunk

logger = logging.getLogger(__name__)

# (separator, name recorded in separatorUsed), tried in order
SEPARATORS: List[Tuple[str, str]] = [
    ("\n## ", "h2"),
    ("\n### ", "h3"),
    ("\n#### ", "h4"),
    ("\n\n", "paragraph"),
    ("\n", "line"),
    (". ", "sentence"),
    (" ", "word"),
]

FORCED = "forced"
UNSPLIT = "none"

_Segment = Tuple[int, int, str]


class RecursiveChunker(BaseChunker):
    """
    Separator-hierarchy chunking with a forced fallback.

    A block that fits in max_chunk_size is emitted as is. Otherwise it is
    split at every occurrence of the current separator, keeping each
    separator at the start of the following piece so that no text is lost.
    Pieces that are still too large are split again starting at the next
    separator, so the recursion depth is bounded by the number of
    separators. When separators run out, or the block is no larger than
    min_chunk_size, it is cut at exact max_chunk_size boundaries.

    Example:
        >>> chunker = RecursiveChunker(max_chunk_size=10, min_chunk_size=0)
        >>> doc = Document.from_text("d", "alpha beta gamma")
        >>> [c.content for c in chunker.chunk(doc)]
        ['alpha', ' beta', ' gamma']
    """

    strategy_name = "recursive"

    def __init__(self, max_chunk_size: int = 50000, min_chunk_size: int = 100) -> None:
        """
        Initialize the recursive chunker.

        Args:
            max_chunk_size: Maximum characters per chunk
            min_chunk_size: Blocks at or below this size are force-split

        Raises:
            InvalidArgumentError: If max_chunk_size <= 0 or min_chunk_size < 0
        """
        require_positive(max_chunk_size, "max_chunk_size")
        require_non_negative(min_chunk_size, "min_chunk_size")

        self.max_chunk_size = max_chunk_size
        self.min_chunk_size = min_chunk_size

    @staticmethod
    def split_keeping_separator(content: str, start: int, end: int, separator: str) -> List[Tuple[int, int]]:
        """
        Split content[start:end] before each occurrence of separator.

        Returns:
            Spans of the pieces; concatenated they cover [start, end) exactly
        """
        spans = []
        last = start
        found = content.find(separator, start, end)
        while found != -1:
            if found > last:
                spans.append((last, found))
            last = found
            found = content.find(separator, last + len(separator), end)

        if last < end:
            spans.append((last, end))

        return spans

    def _force_split(self, start: int, end: int, segments: List[_Segment]) -> None:
        for position in range(start, end, self.max_chunk_size):
            segments.append((position, min(position + self.max_chunk_size, end), FORCED))

    def _split(self, content: str, start: int, end: int, level: int, segments: List[_Segment]) -> None:
        length = end - start

        if length <= self.max_chunk_size:
            segments.append((start, end, SEPARATORS[level][1] if level < len(SEPARATORS) else FORCED))
            return

        if level >= len(SEPARATORS) or length <= self.min_chunk_size:
            self._force_split(start, end, segments)
            return

        separator, name = SEPARATORS[level]
        spans = self.split_keeping_separator(content, start, end, separator)

        if len(spans) <= 1:
            self._split(content, start, end, level + 1, segments)
            return

        for piece_start, piece_end in spans:
            if piece_end - piece_start <= self.max_chunk_size:
                segments.append((piece_start, piece_end, name))
            else:
                self._split(content, piece_start, piece_end, level + 1, segments)

    def chunk(
        self,
        document: Document,
        cancel_token: Optional[CancellationToken] = None
    ) -> Iterator[ContentChunk]:
        content = document.content
        if not content:
            return

        if len(content) <= self.max_chunk_size:
            segments = [(0, len(content), UNSPLIT)]
        else:
            segments = []
            self._split(content, 0, len(content), 0, segments)

        total = len(segments)
        logger.debug(f"Recursive chunking produced {total} segment(s) from {len(content)} characters")

        for index, (start, end, separator_used) in enumerate(segments):
            check_cancelled(cancel_token, index)

            yield ContentChunk(
                index=index,
                content=content[start:end],
                start_position=start,
                end_position=end,
                metadata={
                    "documentId": document.id,
                    "totalChunks": str(total),
                    "strategy": self.strategy_name,
                    "separatorUsed": separator_used,
                },
            )
