"""
Output formatting for the RLM CLI.

Human-readable output uses rich tables; machine-readable output is compact
JSON written with typer.echo so that it can be piped. Chunk and document
text is always echoed verbatim, never interpreted as rich markup.
"""

import json
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.chunking import ContentChunk
from ..core.documents import DocumentMetadata
from ..core.session import Session

console = Console()

PREVIEW_LENGTH = 100
PROGRESS_BAR_WIDTH = 30


def echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False))


def _property_table() -> Table:
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    return table


def chunk_to_output(
    chunk: ContentChunk,
    total_chunks: int,
    has_more: bool,
    extra: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """JSON view of one chunk as printed by next, skip and jump."""
    token_count = chunk.metadata.get("tokenCount")
    metadata = dict(chunk.metadata)
    if extra:
        metadata.update(extra)
    return {
        "index": chunk.index,
        "totalChunks": total_chunks,
        "startPosition": chunk.start_position,
        "endPosition": chunk.end_position,
        "length": chunk.length,
        "tokenEstimate": chunk.token_estimate,
        "tokenCount": int(token_count) if token_count and token_count.isdigit() else None,
        "hasMore": has_more,
        "content": chunk.content,
        "metadata": metadata,
    }


def print_chunk(chunk: ContentChunk, total_chunks: int, has_more: Optional[bool] = None) -> None:
    """Print a chunk summary table followed by the chunk text."""
    table = _property_table()
    table.add_row("Index", f"{chunk.index + 1} of {total_chunks}")
    table.add_row("Position", f"{chunk.start_position:,}..{chunk.end_position:,}")
    table.add_row("Length", f"{chunk.length:,} chars")

    token_count = chunk.metadata.get("tokenCount")
    if token_count:
        table.add_row("Tokens", token_count)
    else:
        table.add_row("Tokens (est)", f"~{chunk.token_estimate:,}")

    if has_more is not None:
        table.add_row("Remaining", str(total_chunks - chunk.index - 1) if has_more else "[green]Last chunk[/green]")

    for key, label in (("sectionHeader", "Section"), ("headerPath", "Path"),
                       ("matchCount", "Matches"), ("selectedBy", "Selected by")):
        if key in chunk.metadata:
            table.add_row(label, escape(chunk.metadata[key]))

    console.print(table)
    typer.echo("")
    typer.echo(chunk.content)


def print_chunk_stats(chunks: List[ContentChunk], strategy: str, elapsed_ms: float) -> None:
    total_chars = sum(c.length for c in chunks)
    sizes = [c.length for c in chunks]
    total_tokens = sum(c.token_estimate for c in chunks)
    console.print(f"[green]Created {len(chunks)} chunk(s)[/green] using [cyan]{strategy}[/cyan] strategy.")
    console.print(
        f"[dim]Stats: avg={total_chars // len(chunks):,}, min={min(sizes):,}, max={max(sizes):,} chars[/dim]"
    )
    console.print(f"[dim]Total: {total_chars:,} chars, ~{total_tokens:,} tokens | Time: {elapsed_ms:,.0f} ms[/dim]")
    typer.echo("")


def print_document_info(metadata: DocumentMetadata, elapsed_ms: Optional[float] = None) -> None:
    table = _property_table()
    table.add_row("Source", escape(metadata.source))
    table.add_row("Length", f"{metadata.total_length:,} chars")
    table.add_row("Tokens (est)", f"~{metadata.token_estimate:,}")
    table.add_row("Lines", f"{metadata.line_count:,}")
    file_count = metadata.extended.get("fileCount")
    if file_count:
        table.add_row("Files", file_count)
    if metadata.content_type:
        table.add_row("Content Type", metadata.content_type)
    if metadata.word_count is not None:
        table.add_row("Words", f"{metadata.word_count:,}")
    if metadata.header_count:
        table.add_row("Headers", f"{metadata.header_count:,}")
    if elapsed_ms is not None:
        table.add_row("Load Time", f"{elapsed_ms:,.0f} ms")
    console.print(table)


def session_info_output(session: Session) -> Dict[str, Any]:
    """JSON view of a session for `rlm info --json`; empty when nothing is loaded."""
    if not session.has_document:
        return {}
    metadata = session.metadata
    output = {
        "source": metadata.source if metadata else "unknown",
        "totalLength": metadata.total_length if metadata else len(session.content),
        "tokenEstimate": metadata.token_estimate if metadata else len(session.content) // 4,
        "lineCount": metadata.line_count if metadata else 0,
        "loadedAt": metadata.loaded_at if metadata else "",
        "chunkCount": len(session.chunk_buffer),
        "currentChunkIndex": session.current_index,
        "remainingChunks": session.remaining_chunks,
        "recursionDepth": session.recursion_depth,
        "maxRecursionDepth": session.max_recursion_depth,
    }
    output.update(session.progress().to_dict())
    return output


def print_progress(session: Session) -> None:
    progress = session.progress()
    percent = progress.percent_complete
    filled = round(PROGRESS_BAR_WIDTH * percent / 100)
    bar = "█" * filled + "░" * (PROGRESS_BAR_WIDTH - filled)
    color = "yellow" if percent < 50 else "green"
    console.print(f"[cyan]Progress:[/cyan] [{color}]{bar}[/{color}] {percent:.1f}%")
    console.print(
        f"[cyan]Chunks:[/cyan] {progress.current_chunk:,} / {progress.total_chunks:,} "
        f"({progress.remaining_chunks:,} remaining)"
    )
    console.print(f"[cyan]Characters:[/cyan] {progress.processed_chars:,} / {progress.total_chars:,} processed")
    console.print(f"[cyan]Results:[/cyan] {progress.result_count:,} stored")
    console.print(f"[cyan]Avg chunk size:[/cyan] {progress.average_chunk_size:,} chars")
    console.print(f"[cyan]Est. tokens remaining:[/cyan] ~{progress.remaining_token_estimate:,}")


def print_session_info(session: Session, show_progress: bool = False) -> None:
    metadata = session.metadata
    table = _property_table()
    table.add_row("Source", escape(metadata.source) if metadata else "unknown")
    if metadata:
        table.add_row("Length", f"{metadata.total_length:,} chars")
        table.add_row("Tokens (est)", f"~{metadata.token_estimate:,}")
        table.add_row("Lines", f"{metadata.line_count:,}")
        table.add_row("Loaded at", metadata.loaded_at)
    table.add_row("Recursion depth", f"{session.recursion_depth} / {session.max_recursion_depth}")
    console.print(table)

    if session.has_chunks:
        typer.echo("")
        if show_progress:
            print_progress(session)
        else:
            console.print(
                f"[cyan]Chunks:[/cyan] {len(session.chunk_buffer)} chunks, at index {session.current_index + 1}"
            )
            console.print(f"[cyan]Remaining:[/cyan] {session.remaining_chunks} chunks")

    if session.results:
        typer.echo("")
        console.print(f"[cyan]Stored results:[/cyan] {len(session.results)}")
        keys = sorted(session.results)
        for key in keys[:5]:
            console.print(f"  - {escape(key)}")
        if len(keys) > 5:
            console.print(f"  ... and {len(keys) - 5} more")


def print_results_table(results: Dict[str, str]) -> None:
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Key", style="cyan")
    table.add_column("Value (truncated)")
    for key, value in sorted(results.items()):
        truncated = value[:PREVIEW_LENGTH] + "..." if len(value) > PREVIEW_LENGTH else value
        table.add_row(escape(key), escape(truncated))
    console.print(table)
