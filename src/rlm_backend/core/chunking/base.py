"""
Chunker Base Module

Defines the contract shared by every chunking strategy: a document goes in,
a lazy ordered stream of ContentChunk comes out.
"""

import re
import logging
from abc import ABC, abstractmethod
from typing import Iterator, List, Optional

from ..documents import Document
from ...exceptions import InvalidArgumentError
from .cancellation import CancellationToken
from .chunk import ContentChunk

logger = logging.getLogger(__name__)


class BaseChunker(ABC):
    """
    Abstract base class for chunking strategies.

    Subclasses implement chunk() as a generator. Nothing is computed until
    the consumer pulls, and the cancellation token is honoured between
    emissions.
    """

    #: Value written to the "strategy" metadata key
    strategy_name: str = "base"

    @abstractmethod
    def chunk(
        self,
        document: Document,
        cancel_token: Optional[CancellationToken] = None
    ) -> Iterator[ContentChunk]:
        """
        Decompose a document into chunks.

        Args:
            document: Document to decompose
            cancel_token: Optional token checked before each emission

        Yields:
            ContentChunk objects in ascending document order

        Raises:
            ChunkingCancelledError: If the token is cancelled mid-stream
        """
        ...

    def chunk_all(
        self,
        document: Document,
        cancel_token: Optional[CancellationToken] = None
    ) -> List[ContentChunk]:
        """Drain chunk() into a list."""
        return list(self.chunk(document, cancel_token))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(strategy={self.strategy_name!r})"


def compile_pattern(pattern: str, argument: str = "pattern") -> re.Pattern:
    """
    Compile a case-insensitive regular expression.

    Args:
        pattern: Regular expression source
        argument: Name of the option the pattern came from, for the error

    Returns:
        Compiled pattern

    Raises:
        InvalidArgumentError: If the pattern does not compile
    """
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise InvalidArgumentError(
            f"Invalid regular expression for {argument}: {e}",
            argument=argument,
            suggestions=[
                "Escape special characters such as ( ) [ ] with a backslash",
                "Quote the pattern in the shell so it is passed unchanged",
            ],
        ) from e


def require_positive(value: int, argument: str) -> None:
    """Raise InvalidArgumentError unless value is an integer greater than zero."""
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise InvalidArgumentError(f"{argument} must be a positive integer, got: {value!r}", argument=argument)


def require_non_negative(value: int, argument: str) -> None:
    """Raise InvalidArgumentError unless value is an integer of zero or more."""
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise InvalidArgumentError(f"{argument} must be a non-negative integer, got: {value!r}", argument=argument)
