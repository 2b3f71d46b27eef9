"""
Chunker Factory Module

Builds chunkers from a strategy and a ChunkingOptions instance, including the
automatic strategy that defers its choice until it sees the document.
"""

import logging
from typing import Iterator, Optional, Union

from ..documents import Document
from ...exceptions import PreconditionNotMetError
from .base import BaseChunker
from .cancellation import CancellationToken
from .chunk import ContentChunk
from .config import ChunkingOptions, ChunkingStrategy
from .filtering import FilteringChunker
from .recursive import RecursiveChunker
from .selector import select_strategy
from .semantic import SemanticChunker
from .token_based import TokenBasedChunker
from .tokenizer import Tokenizer, TiktokenTokenizer
from .uniform import UniformChunker

logger = logging.getLogger(__name__)


def create_chunker(
    strategy: Union[ChunkingStrategy, str],
    options: Optional[ChunkingOptions] = None,
    tokenizer: Optional[Tokenizer] = None
) -> BaseChunker:
    """
    Create a chunker for a strategy.

    Args:
        strategy: Strategy enum member or name
        options: Strategy parameters; defaults when omitted
        tokenizer: Tokenizer for the token strategy; tiktoken when omitted

    Returns:
        Configured chunker

    Raises:
        InvalidArgumentError: If the strategy is unknown or an option is invalid
        PreconditionNotMetError: If the filter strategy has no pattern
    """
    if isinstance(strategy, str):
        strategy = ChunkingStrategy.from_string(strategy)
    options = options or ChunkingOptions()

    if strategy == ChunkingStrategy.UNIFORM:
        return UniformChunker(options.chunk_size, options.overlap)

    if strategy == ChunkingStrategy.FILTER:
        return FilteringChunker(options.pattern, options.context_size)

    if strategy == ChunkingStrategy.SEMANTIC:
        return SemanticChunker(
            min_level=options.min_level,
            max_level=options.max_level,
            min_size=options.min_size,
            max_size=options.max_size,
            merge_small=options.merge_small,
            filter_pattern=options.pattern,
        )

    if strategy == ChunkingStrategy.TOKEN:
        return TokenBasedChunker(
            max_tokens=options.max_tokens,
            overlap_tokens=options.overlap_tokens,
            tokenizer=tokenizer or TiktokenTokenizer(options.token_encoding),
        )

    if strategy == ChunkingStrategy.RECURSIVE:
        return RecursiveChunker(options.chunk_size, options.min_chunk_size)

    return AutoChunker(options, tokenizer)


class AutoChunker(BaseChunker):
    """
    Chunker that selects a concrete strategy from the query and the document.

    The choice is made by select_strategy() when the document is first seen
    and is available afterwards as selected_strategy. Chunks produced this
    way carry selectedBy=auto in their metadata.

    Example:
        >>> auto = AutoChunker(ChunkingOptions(query="compare sections"))
        >>> auto.select(Document.from_text("d", "# A\\n\\n## B\\n"))
        <ChunkingStrategy.SEMANTIC: 'semantic'>
    """

    strategy_name = "auto"

    def __init__(self, options: Optional[ChunkingOptions] = None, tokenizer: Optional[Tokenizer] = None) -> None:
        self.options = options or ChunkingOptions()
        self.tokenizer = tokenizer
        self.selected_strategy: Optional[ChunkingStrategy] = None

    def select(self, document: Document) -> ChunkingStrategy:
        """Resolve and remember the concrete strategy for a document."""
        self.selected_strategy = select_strategy(self.options.query, document.content, self.options.pattern)
        logger.info(f"Auto-selected strategy: {self.selected_strategy.value}")
        return self.selected_strategy

    def create_delegate(self, document: Document) -> BaseChunker:
        """
        Build the concrete chunker for a document.

        Raises:
            PreconditionNotMetError: If the selection is filter and no pattern is set
        """
        strategy = self.select(document)
        if strategy == ChunkingStrategy.FILTER and not self.options.pattern:
            raise PreconditionNotMetError(
                "Auto selection chose the filter strategy, which requires a pattern",
                suggestions=[
                    "Pass --pattern with a regular expression for the items you are looking for",
                    "Choose a strategy explicitly with --strategy",
                ],
            )
        return create_chunker(strategy, self.options, self.tokenizer)

    def chunk(
        self,
        document: Document,
        cancel_token: Optional[CancellationToken] = None
    ) -> Iterator[ContentChunk]:
        delegate = self.create_delegate(document)
        for chunk in delegate.chunk(document, cancel_token):
            yield chunk.with_metadata(selectedBy="auto")
