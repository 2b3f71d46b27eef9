"""
Chunking pipeline: drains a chunker through the enrichment chain.
"""

import time
import logging
from typing import List, Optional

from ..documents import Document
from .base import BaseChunker
from .cancellation import CancellationToken
from .chunk import ContentChunk
from .processors import ChunkProcessorChain

logger = logging.getLogger(__name__)


def run_chunking(
    chunker: BaseChunker,
    document: Document,
    chain: Optional[ChunkProcessorChain] = None,
    cancel_token: Optional[CancellationToken] = None
) -> List[ContentChunk]:
    """
    Produce every chunk of a document and enrich it.

    The result is only returned once the stream is fully drained, so a
    cancelled run never yields a partial list.

    Args:
        chunker: Strategy to run
        document: Document to chunk
        chain: Enrichment chain; no enrichment when omitted
        cancel_token: Optional cancellation token

    Returns:
        Enriched chunks in order

    Raises:
        ChunkingCancelledError: If cancelled before the stream finished
    """
    started = time.perf_counter()
    if chain is None:
        chain = ChunkProcessorChain()

    chunks = [chain.process(chunk, cancel_token) for chunk in chunker.chunk(document, cancel_token)]

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"Chunked document {document.id!r} into {len(chunks)} chunk(s) with {chunker!r} in {elapsed_ms:.1f} ms")
    return chunks
