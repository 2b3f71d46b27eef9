"""
Filtering Chunker Module

Needle-search strategy: emits the regions of a document around regex matches,
merging regions whose context windows touch or overlap.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from ..documents import Document
from ...exceptions import PreconditionNotMetError
from .base import BaseChunker, compile_pattern, require_non_negative
from .cancellation import CancellationToken, check_cancelled
from .chunk import ContentChunk

logger = logging.getLogger(__name__)


@dataclass
class _Segment:
    """Merged context window covering one or more matches."""
    start: int
    end: int
    matched_terms: List[str] = field(default_factory=list)
    match_count: int = 0

    def distinct_terms(self) -> List[str]:
        seen = []
        for term in self.matched_terms:
            if term not in seen:
                seen.append(term)
        return seen


class FilteringChunker(BaseChunker):
    """
    Emit one chunk per merged context window around regex matches.

    Matching is case-insensitive. Each match contributes the window
    [match_start - context_size, match_end + context_size] clipped to the
    document; a window whose start is at or before the running end of the
    previous one is merged into it. A document without matches produces no
    chunks.

    Example:
        >>> chunker = FilteringChunker(r"[\\w.]+@[\\w.]+", context_size=100)
        >>> doc = Document.from_text("mail", "Email 1: a@b.com and Email 2: c@d.com are here.")
        >>> [c.metadata["matchCount"] for c in chunker.chunk(doc)]
        ['2']
    """

    strategy_name = "filtering"

    def __init__(self, pattern: Optional[str], context_size: int = 500) -> None:
        """
        Initialize the filtering chunker.

        Args:
            pattern: Regular expression to search for
            context_size: Characters of context kept on each side of a match

        Raises:
            PreconditionNotMetError: If no pattern is given
            InvalidArgumentError: If the pattern is malformed or context_size < 0
        """
        if not pattern:
            raise PreconditionNotMetError(
                "Filter strategy requires a pattern",
                suggestions=["Pass --pattern with a regular expression"],
            )
        require_non_negative(context_size, "context_size")

        self.pattern = pattern
        self.context_size = context_size
        self._regex = compile_pattern(pattern, "pattern")

    def _segments(self, content: str) -> Iterator[_Segment]:
        """
        Yield merged segments in position order.

        Match starts are non-decreasing, so window starts are too and the
        merge can run as a single streaming pass.
        """
        current: Optional[_Segment] = None
        length = len(content)

        for match in self._regex.finditer(content):
            start = max(0, match.start() - self.context_size)
            end = min(length, match.end() + self.context_size)

            if current is not None and start <= current.end:
                current.end = max(current.end, end)
                current.matched_terms.append(match.group(0))
                current.match_count += 1
                continue

            if current is not None:
                yield current
            current = _Segment(start=start, end=end, matched_terms=[match.group(0)], match_count=1)

        if current is not None:
            yield current

    def chunk(
        self,
        document: Document,
        cancel_token: Optional[CancellationToken] = None
    ) -> Iterator[ContentChunk]:
        content = document.content
        index = 0

        for segment in self._segments(content):
            if segment.end == segment.start:
                # zero-width match with no context
                continue

            check_cancelled(cancel_token, index)

            yield ContentChunk(
                index=index,
                content=content[segment.start:segment.end],
                start_position=segment.start,
                end_position=segment.end,
                metadata={
                    "documentId": document.id,
                    "matchedTerms": ", ".join(segment.distinct_terms()),
                    "matchCount": str(segment.match_count),
                    "strategy": self.strategy_name,
                },
            )
            index += 1

        logger.debug(f"Filtering produced {index} chunk(s) for pattern {self.pattern!r}")
