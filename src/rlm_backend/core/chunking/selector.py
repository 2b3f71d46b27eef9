"""
Strategy Selector Module

Chooses a chunking strategy from a free-text query and the shape of the
document. The selector is a pure function; it never builds a chunker.
"""

import re
import logging
from typing import Optional

from .config import ChunkingStrategy

logger = logging.getLogger(__name__)

# Needle-in-haystack queries look for specific items
NEEDLE_INDICATORS = (
    "find", "locate", "where is", "where are", "what is the",
    "specific", "search", "look for", "extract", "identify",
)

# Aggregation queries process the whole document systematically
AGGREGATION_INDICATORS = (
    "all", "count", "list", "summarize", "total", "how many",
    "every", "entire", "full", "comprehensive", "complete",
)

# Structural queries compare or navigate sections
STRUCTURAL_INDICATORS = (
    "compare", "contrast", "difference", "differences", "similar",
    "versus", "vs", "sections", "chapters", "structure", "outline",
    "hierarchy", "organization", "topics", "categories",
)

# Implementation queries look for code and configuration patterns
IMPLEMENTATION_INDICATORS = (
    "implement", "implementation", "pattern", "patterns", "example",
    "examples", "code", "function", "method", "class", "interface",
    "api", "endpoint", "configuration", "config",
)

KEYWORD_WEIGHT = 2
STRUCTURE_BONUS = 1

_MARKDOWN_HEADER = re.compile(r"^#{1,3} ", re.MULTILINE)


def has_markdown_headers(content: str) -> bool:
    """Whether the content has a level 1-3 ATX header at the start of a line."""
    return _MARKDOWN_HEADER.search(content) is not None


def _score(query: str, indicators) -> int:
    # substring hits, so "all" also counts inside "call"
    return sum(1 for indicator in indicators if indicator in query) * KEYWORD_WEIGHT


def select_strategy(
    query: Optional[str],
    content: str,
    pattern: Optional[str] = None
) -> ChunkingStrategy:
    """
    Pick a strategy for a query over a document.

    With a filter pattern, structured documents get semantic chunking in
    hybrid mode and unstructured ones get the filter strategy. Otherwise the
    query is scored against four keyword buckets and the winner is chosen
    with precedence needle > structural > aggregation.

    Args:
        query: Free-text description of what the caller is looking for
        content: Document text, inspected for Markdown headers
        pattern: Optional filter pattern supplied by the caller

    Returns:
        FILTER, SEMANTIC or TOKEN

    Example:
        >>> select_strategy("compare sections", "# A\\ntext\\n## B\\ntext")
        <ChunkingStrategy.SEMANTIC: 'semantic'>
    """
    has_headers = has_markdown_headers(content)

    if pattern:
        return ChunkingStrategy.SEMANTIC if has_headers else ChunkingStrategy.FILTER

    lowered = (query or "").lower()
    needle = _score(lowered, NEEDLE_INDICATORS)
    aggregation = _score(lowered, AGGREGATION_INDICATORS)
    structural = _score(lowered, STRUCTURAL_INDICATORS)
    implementation = _score(lowered, IMPLEMENTATION_INDICATORS)

    if has_headers:
        structural += STRUCTURE_BONUS

    logger.debug(
        f"Strategy scores: needle={needle}, structural={structural}, "
        f"aggregation={aggregation}, implementation={implementation}, headers={has_headers}"
    )

    if needle > 0 and needle >= structural and needle >= aggregation:
        return ChunkingStrategy.FILTER

    if structural > 0 and structural >= aggregation:
        return ChunkingStrategy.SEMANTIC

    if aggregation > 0:
        return ChunkingStrategy.TOKEN

    if implementation > 0 and has_headers:
        return ChunkingStrategy.SEMANTIC

    return ChunkingStrategy.SEMANTIC if has_headers else ChunkingStrategy.TOKEN
