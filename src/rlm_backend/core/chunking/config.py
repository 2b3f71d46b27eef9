"""
Chunking Configuration Module

Contains the strategy enumeration and the options object that carries every
strategy parameter from the configuration layer and the CLI to the chunker
factory.

Components:
- ChunkingStrategy: Enumeration of available chunking strategies
- ChunkingOptions: Validated parameter set for all strategies
"""

import logging
from dataclasses import dataclass, asdict, fields
from enum import Enum
from typing import Dict, Any, Optional

from ...exceptions import InvalidArgumentError
from .base import require_positive, require_non_negative

logger = logging.getLogger(__name__)


class ChunkingStrategy(Enum):
    """
    Enumeration of available chunking strategies.

    AUTO is resolved to one of FILTER, SEMANTIC, TOKEN or UNIFORM by the
    strategy selector before any chunk is produced.
    """
    UNIFORM = "uniform"  # Fixed-size sliding window
    FILTER = "filter"  # Regex matches with surrounding context
    SEMANTIC = "semantic"  # Markdown header sections
    TOKEN = "token"  # Sliding window over tokenizer ids
    RECURSIVE = "recursive"  # Separator hierarchy with forced fallback
    AUTO = "auto"  # Query-driven selection

    @classmethod
    def from_string(cls, value: str) -> 'ChunkingStrategy':
        """
        Parse a strategy name case-insensitively.

        Raises:
            InvalidArgumentError: If the name is not a known strategy
        """
        normalized = (value or "").strip().lower()
        for strategy in cls:
            if strategy.value == normalized:
                return strategy

        valid = ", ".join(s.value for s in cls)
        raise InvalidArgumentError(
            f"Unknown chunking strategy: {value!r}",
            argument="strategy",
            suggestions=[f"Use one of: {valid}"],
        )


@dataclass
class ChunkingOptions:
    """
    Parameters for every chunking strategy.

    Only the fields relevant to the selected strategy are used; the rest keep
    their defaults. Validation runs on construction so a bad value is reported
    before any chunk is produced.

    Attributes:
        chunk_size: Window size for uniform, maximum chunk size for recursive
        overlap: Character overlap between uniform windows
        pattern: Regex for the filter strategy and semantic hybrid mode
        context_size: Characters kept around each filter match
        min_level: Lowest header level that starts a semantic section
        max_level: Highest header level that starts a semantic section
        min_size: Semantic merge threshold (used with merge_small)
        max_size: Semantic split threshold (0 disables splitting)
        merge_small: Merge consecutive small semantic sections
        max_tokens: Token window size for the token strategy
        overlap_tokens: Token overlap between windows
        min_chunk_size: Recursive block size below which splitting is forced
        token_encoding: tiktoken encoding name for the token strategy
        query: Query text used by the auto strategy

    Example:
        >>> options = ChunkingOptions(chunk_size=1000, overlap=100)
        >>> options.to_dict()["chunk_size"]
        1000
    """

    chunk_size: int = 50000
    overlap: int = 0
    pattern: Optional[str] = None
    context_size: int = 500
    min_level: int = 1
    max_level: int = 3
    min_size: int = 0
    max_size: int = 0
    merge_small: bool = False
    max_tokens: int = 512
    overlap_tokens: int = 50
    min_chunk_size: int = 100
    token_encoding: str = "cl100k_base"
    query: Optional[str] = None

    def __post_init__(self) -> None:
        """
        Validate option ranges.

        Raises:
            InvalidArgumentError: If any numeric option is out of range
        """
        require_positive(self.chunk_size, "chunk_size")
        require_non_negative(self.overlap, "overlap")
        require_non_negative(self.context_size, "context_size")
        require_non_negative(self.min_size, "min_size")
        require_non_negative(self.max_size, "max_size")
        require_positive(self.max_tokens, "max_tokens")
        require_non_negative(self.overlap_tokens, "overlap_tokens")
        require_non_negative(self.min_chunk_size, "min_chunk_size")

        if not 1 <= self.min_level <= self.max_level <= 6:
            raise InvalidArgumentError(
                f"Header levels must satisfy 1 <= min_level <= max_level <= 6, "
                f"got: min_level={self.min_level}, max_level={self.max_level}",
                argument="min_level",
            )

        if self.overlap >= self.chunk_size:
            logger.warning(
                f"overlap ({self.overlap}) is not smaller than chunk_size ({self.chunk_size}); "
                f"uniform windows will advance one character at a time"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert options to a dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChunkingOptions':
        """
        Create options from a dictionary, ignoring unknown keys.

        Args:
            data: Mapping of option names to values

        Returns:
            Validated ChunkingOptions instance
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.debug(f"Ignoring unknown chunking options: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def merged_with(self, **overrides: Any) -> 'ChunkingOptions':
        """Return new options with the non-None overrides applied."""
        values = self.to_dict()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ChunkingOptions.from_dict(values)
