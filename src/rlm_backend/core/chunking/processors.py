"""
Chunk Processors Module

Post-generation enrichment of chunk metadata. Processors never change a
chunk's content or position; each returns a new chunk with extra metadata.

Components:
- ChunkProcessor: Protocol for a single metadata transform
- ChunkStatisticsProcessor: Word, line and character counts
- ChunkProcessorChain: Ordered application of processors
"""

import re
import logging
from typing import List, Optional, Protocol, Sequence

from .cancellation import CancellationToken, check_cancelled
from .chunk import ContentChunk

logger = logging.getLogger(__name__)

_WORD_PATTERN = re.compile(r"\b\w+\b")


class ChunkProcessor(Protocol):
    """Protocol for chunk metadata processors."""

    def process(self, chunk: ContentChunk) -> ContentChunk:
        """Return the chunk with additional metadata."""
        ...


class ChunkStatisticsProcessor:
    """
    Adds wordCount, lineCount, charCount and charCountNoWhitespace.

    Example:
        >>> chunk = ContentChunk(0, "one two\\nthree", 0, 13, {})
        >>> ChunkStatisticsProcessor().process(chunk).metadata["lineCount"]
        '2'
    """

    def process(self, chunk: ContentChunk) -> ContentChunk:
        content = chunk.content
        return chunk.with_metadata(
            wordCount=len(_WORD_PATTERN.findall(content)),
            lineCount=max(1, len(content.split("\n"))),
            charCount=len(content),
            charCountNoWhitespace=sum(1 for c in content if not c.isspace()),
        )


class ChunkProcessorChain:
    """
    Applies processors to each chunk in order.

    An empty chain returns chunks unchanged. Cancellation is checked before
    each processor runs.
    """

    def __init__(self, processors: Optional[Sequence[ChunkProcessor]] = None) -> None:
        self.processors: List[ChunkProcessor] = list(processors or [])

    @classmethod
    def create_default(cls) -> 'ChunkProcessorChain':
        """Chain used by the CLI: statistics only."""
        return cls([ChunkStatisticsProcessor()])

    def add(self, processor: ChunkProcessor) -> 'ChunkProcessorChain':
        self.processors.append(processor)
        return self

    def __len__(self) -> int:
        return len(self.processors)

    def process(
        self,
        chunk: ContentChunk,
        cancel_token: Optional[CancellationToken] = None
    ) -> ContentChunk:
        """
        Run every processor on a chunk.

        Raises:
            ChunkingCancelledError: If the token is cancelled between processors
        """
        for processor in self.processors:
            check_cancelled(cancel_token, chunk.index)
            chunk = processor.process(chunk)
        return chunk
