"""
Chunking commands for the RLM CLI: chunk and filter.

Both commands replace the session's chunk buffer with the output of one
chunking run and print the first chunk.
"""

import time
from typing import List, Optional

import typer
from rich import print as rprint
from rich.markup import escape

from ..core.chunking import (
    AutoChunker,
    BaseChunker,
    CancellationToken,
    ChunkingOptions,
    ChunkingStrategy,
    ChunkProcessorChain,
    ContentChunk,
    cancel_on_interrupt,
    create_chunker,
    run_chunking,
)
from ..core.session import Session
from .common import (
    COMMAND_ERRORS,
    exit_with_error,
    get_config_manager,
    get_session_store,
    json_option,
    session_option,
)
from .output import echo_json, print_chunk, print_chunk_stats


def _run(chunker: BaseChunker, session: Session) -> List[ContentChunk]:
    token = CancellationToken()
    with cancel_on_interrupt(token):
        return run_chunking(chunker, session.to_document(), ChunkProcessorChain.create_default(), token)


def _chunk_session(
    ctx: typer.Context,
    session_id: Optional[str],
    strategy: ChunkingStrategy,
    options: ChunkingOptions,
    as_json: bool,
) -> None:
    started = time.perf_counter()
    try:
        store = get_session_store(ctx)
        session = store.load(session_id)
        session.require_document()
        chunker = create_chunker(strategy, options)
        chunks = _run(chunker, session)
        if chunks:
            session.set_chunks(chunks)
            store.save(session, session_id)
    except COMMAND_ERRORS as e:
        exit_with_error(e)
    elapsed_ms = (time.perf_counter() - started) * 1000

    used = strategy.value
    if isinstance(chunker, AutoChunker) and chunker.selected_strategy is not None:
        used = chunker.selected_strategy.value

    if as_json:
        echo_json({
            "strategy": strategy.value,
            "selectedStrategy": used,
            "chunkCount": len(chunks),
            "chunks": [chunk.to_dict() for chunk in chunks],
        })
        return

    if not chunks:
        rprint("[yellow]No chunks created.[/yellow] Check your pattern or document content.")
        return

    if used != strategy.value:
        rprint(f"[dim]Auto-selected strategy:[/dim] [cyan]{used}[/cyan]")
    if used == ChunkingStrategy.SEMANTIC.value and options.pattern:
        rprint(f"[dim]Hybrid mode:[/dim] semantic + filter pattern [cyan]{escape(options.pattern)}[/cyan]")
    print_chunk_stats(chunks, used, elapsed_ms)
    print_chunk(chunks[0], len(chunks))


def chunk(
    ctx: typer.Context,
    strategy: Optional[str] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Chunking strategy: uniform, filter, semantic, token, recursive, auto (default from config)",
    ),
    size: Optional[int] = typer.Option(
        None, "--size", help="Chunk size for uniform, maximum size for recursive (default: 50000)"
    ),
    overlap: Optional[int] = typer.Option(None, "--overlap", help="Overlap size for uniform strategy (default: 0)"),
    pattern: Optional[str] = typer.Option(
        None, "--pattern", "-p", help="Regex pattern for filter strategy (or hybrid filter with semantic)"
    ),
    context_size: Optional[int] = typer.Option(
        None, "--context", "-c", help="Context size around matches for filter strategy (default: 500)"
    ),
    min_level: Optional[int] = typer.Option(
        None, "--min-level", help="Minimum header level for semantic strategy (default: 1)"
    ),
    max_level: Optional[int] = typer.Option(
        None, "--max-level", help="Maximum header level for semantic strategy (default: 3)"
    ),
    min_size: Optional[int] = typer.Option(
        None, "--min-size", help="Minimum section size for semantic strategy, used with --merge-small"
    ),
    max_size: Optional[int] = typer.Option(
        None, "--max-size", help="Maximum section size for semantic strategy; larger sections are split"
    ),
    merge_small: bool = typer.Option(
        False, "--merge-small", help="Merge consecutive small sections (use with --min-size)"
    ),
    max_tokens: Optional[int] = typer.Option(
        None, "--max-tokens", help="Maximum tokens per chunk for token strategy (default: 512)"
    ),
    overlap_tokens: Optional[int] = typer.Option(
        None, "--overlap-tokens", help="Overlap tokens for token strategy (default: 50)"
    ),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Query text for auto strategy selection"),
    as_json: bool = json_option(),
    session_id: Optional[str] = session_option(),
) -> None:
    """
    Chunk the loaded document using the selected strategy.

    Strategies:
    • uniform: fixed-size windows with optional overlap
    • filter: regex matches with surrounding context
    • semantic: Markdown header sections (hybrid filter with --pattern)
    • token: token windows sized for a model context
    • recursive: split on headers, paragraphs, lines, sentences, words
    • auto: choose from the query and the document structure

    Example:
        rlm chunk --strategy auto --query "compare the sections"
    """
    try:
        config_manager = get_config_manager(ctx)
        selected = ChunkingStrategy.from_string(strategy) if strategy else config_manager.default_strategy()
        options = config_manager.chunking_options(
            chunk_size=size,
            overlap=overlap,
            pattern=pattern,
            context_size=context_size,
            min_level=min_level,
            max_level=max_level,
            min_size=min_size,
            max_size=max_size,
            merge_small=merge_small or None,
            max_tokens=max_tokens,
            overlap_tokens=overlap_tokens,
            query=query,
        )
    except COMMAND_ERRORS as e:
        exit_with_error(e)

    _chunk_session(ctx, session_id, selected, options, as_json)


def filter_document(
    ctx: typer.Context,
    pattern: str = typer.Argument(..., help="Regex pattern to search for (case-insensitive)"),
    context_size: Optional[int] = typer.Option(
        None, "--context", "-c", help="Context size around matches (default: 500)"
    ),
    as_json: bool = json_option(),
    session_id: Optional[str] = session_option(),
) -> None:
    """
    Chunk the loaded document into regex matches with surrounding context.

    Shorthand for: rlm chunk --strategy filter --pattern PATTERN
    """
    try:
        options = get_config_manager(ctx).chunking_options(pattern=pattern, context_size=context_size)
    except COMMAND_ERRORS as e:
        exit_with_error(e)

    _chunk_session(ctx, session_id, ChunkingStrategy.FILTER, options, as_json)
