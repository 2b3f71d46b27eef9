"""
Tokenizer Module

Tokenizer protocol used by token-based chunking and the default tiktoken
implementation.
"""

import logging
from typing import List, Optional, Protocol

import tiktoken

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "cl100k_base"


class Tokenizer(Protocol):
    """Protocol for encoding text to token ids and back."""

    def encode(self, text: str) -> List[int]:
        """Encode text to an ordered list of token ids."""
        ...

    def decode(self, tokens: List[int]) -> str:
        """Decode token ids back to text."""
        ...


class TiktokenTokenizer:
    """
    Tokenizer backed by a tiktoken encoding.

    The encoding is loaded on first use, since tiktoken may need to fetch
    its BPE ranks the first time an encoding is requested.

    Example:
        >>> tokenizer = TiktokenTokenizer()
        >>> tokenizer.decode(tokenizer.encode("hello world"))
        'hello world'
    """

    def __init__(self, encoding_name: str = DEFAULT_ENCODING) -> None:
        self.encoding_name = encoding_name
        self._encoding: Optional[tiktoken.Encoding] = None

    @property
    def encoding(self) -> tiktoken.Encoding:
        if self._encoding is None:
            logger.debug(f"Loading tiktoken encoding: {self.encoding_name}")
            self._encoding = tiktoken.get_encoding(self.encoding_name)
        return self._encoding

    def encode(self, text: str) -> List[int]:
        # special tokens in user documents are treated as plain text
        return self.encoding.encode(text, disallowed_special=())

    def decode(self, tokens: List[int]) -> str:
        return self.encoding.decode(tokens)

    def __repr__(self) -> str:
        return f"TiktokenTokenizer(encoding_name={self.encoding_name!r})"
