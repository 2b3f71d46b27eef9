"""
Chunking Package - Document Decomposition Strategies

This package turns a document into a lazy, ordered stream of bounded chunks
and enriches the chunks with statistics.

Components:
- ContentChunk: Immutable chunk with position and metadata
- BaseChunker: Contract shared by all strategies
- UniformChunker: Fixed-size sliding window
- FilteringChunker: Regex matches with context
- SemanticChunker: Markdown header sections with hybrid filtering
- TokenBasedChunker: Sliding window over token ids
- RecursiveChunker: Separator hierarchy with forced fallback
- AutoChunker / select_strategy: Query-driven strategy selection
- ChunkingOptions / ChunkingStrategy / create_chunker: Configuration and factory
- ChunkProcessorChain / ChunkStatisticsProcessor: Metadata enrichment
- CancellationToken / cancel_on_interrupt: Cooperative cancellation
- run_chunking: Drain a chunker through the enrichment chain
"""

from .chunk import ContentChunk

from .cancellation import CancellationToken, cancel_on_interrupt

from .base import BaseChunker

from .config import ChunkingStrategy, ChunkingOptions

from .uniform import UniformChunker
from .filtering import FilteringChunker
from .semantic import SemanticChunker
from .token_based import TokenBasedChunker
from .recursive import RecursiveChunker

from .tokenizer import Tokenizer, TiktokenTokenizer

from .selector import select_strategy, has_markdown_headers
from .factory import AutoChunker, create_chunker

from .header_path import HeaderPath

from .processors import ChunkProcessor, ChunkStatisticsProcessor, ChunkProcessorChain
from .pipeline import run_chunking

__all__ = [
    "ContentChunk",
    "CancellationToken",
    "cancel_on_interrupt",
    "BaseChunker",
    "ChunkingStrategy",
    "ChunkingOptions",
    "UniformChunker",
    "FilteringChunker",
    "SemanticChunker",
    "TokenBasedChunker",
    "RecursiveChunker",
    "Tokenizer",
    "TiktokenTokenizer",
    "select_strategy",
    "has_markdown_headers",
    "AutoChunker",
    "create_chunker",
    "HeaderPath",
    "ChunkProcessor",
    "ChunkStatisticsProcessor",
    "ChunkProcessorChain",
    "run_chunking",
]
