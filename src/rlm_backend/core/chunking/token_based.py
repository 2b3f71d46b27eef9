"""
Token-Based Chunker Module

Sliding window over the token ids of a document, for consumers whose
capacity is measured in tokens rather than characters.
"""

import math
import logging
from typing import Dict, Iterator, List, Optional

from ..documents import Document
from .base import BaseChunker, require_positive, require_non_negative
from .cancellation import CancellationToken, check_cancelled
from .chunk import ContentChunk
from .tokenizer import Tokenizer, TiktokenTokenizer

logger = logging.getLogger(__name__)


class TokenBasedChunker(BaseChunker):
    """
    Split a document into windows of at most max_tokens tokens.

    Each window is decoded on its own, so text at window boundaries is an
    approximation rather than an exact round-trip of the source. Character
    positions are derived from the decoded length of the token prefix and
    are approximate for the same reason.

    Attributes:
        max_tokens: Window size in tokens
        overlap_tokens: Tokens shared by consecutive windows
        tokenizer: Encoder/decoder, tiktoken cl100k_base by default
    """

    strategy_name = "token"

    def __init__(
        self,
        max_tokens: int = 512,
        overlap_tokens: int = 50,
        tokenizer: Optional[Tokenizer] = None
    ) -> None:
        """
        Initialize the token-based chunker.

        Args:
            max_tokens: Maximum tokens per chunk
            overlap_tokens: Tokens repeated at the start of the next chunk
            tokenizer: Tokenizer to use; a TiktokenTokenizer when omitted

        Raises:
            InvalidArgumentError: If max_tokens <= 0 or overlap_tokens < 0
        """
        require_positive(max_tokens, "max_tokens")
        require_non_negative(overlap_tokens, "overlap_tokens")

        self.max_tokens = max_tokens
        self.overlap_tokens = overlap_tokens
        self.step = max(1, max_tokens - overlap_tokens)
        self.tokenizer = tokenizer if tokenizer is not None else TiktokenTokenizer()

    def total_chunks(self, total_tokens: int) -> int:
        """Value of the totalChunks metadata, ceil((total - overlap) / step), at least 1."""
        if total_tokens <= self.max_tokens:
            return 1
        return max(1, math.ceil((total_tokens - self.overlap_tokens) / self.step))

    def _window_starts(self, total_tokens: int) -> List[int]:
        # slides until the start passes the last token, tails included
        return list(range(0, total_tokens, self.step))

    def _character_positions(
        self,
        tokens: List[int],
        boundaries: List[int],
        content_length: int
    ) -> Dict[int, int]:
        """
        Map token boundaries to approximate character offsets.

        Boundaries are visited in ascending order and only the tokens between
        consecutive boundaries are decoded, so the whole document is decoded
        once in total.
        """
        positions = {}
        characters = 0
        previous = 0
        for boundary in sorted(set(boundaries)):
            if boundary > previous:
                characters += len(self.tokenizer.decode(tokens[previous:boundary]))
                previous = boundary
            positions[boundary] = min(characters, content_length)
        return positions

    def chunk(
        self,
        document: Document,
        cancel_token: Optional[CancellationToken] = None
    ) -> Iterator[ContentChunk]:
        content = document.content
        if not content:
            return

        tokens = self.tokenizer.encode(content)
        total_tokens = len(tokens)

        if total_tokens <= self.max_tokens:
            check_cancelled(cancel_token, 0)
            yield ContentChunk(
                index=0,
                content=content,
                start_position=0,
                end_position=len(content),
                metadata={
                    "documentId": document.id,
                    "totalChunks": "1",
                    "tokenCount": str(total_tokens),
                    "strategy": self.strategy_name,
                },
            )
            return

        total = self.total_chunks(total_tokens)
        starts = self._window_starts(total_tokens)
        ends = [min(start + self.max_tokens, total_tokens) for start in starts]
        positions = self._character_positions(tokens, starts + ends, len(content))

        logger.debug(
            f"Token chunking: tokens={total_tokens}, max_tokens={self.max_tokens}, "
            f"step={self.step}, total={total}"
        )

        for index, (start, end) in enumerate(zip(starts, ends)):
            check_cancelled(cancel_token, index)

            yield ContentChunk(
                index=index,
                content=self.tokenizer.decode(tokens[start:end]),
                start_position=positions[start],
                end_position=positions[end],
                metadata={
                    "documentId": document.id,
                    "totalChunks": str(total),
                    "tokenCount": str(end - start),
                    "startToken": str(start),
                    "endToken": str(end),
                    "strategy": self.strategy_name,
                },
            )
