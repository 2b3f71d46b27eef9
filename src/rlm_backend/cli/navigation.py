"""
Navigation commands for the RLM CLI: next, skip and jump.
"""

from typing import Optional

import typer
from rich import print as rprint

from ..core.session import Session
from .common import COMMAND_ERRORS, exit_with_error, json_option, open_session, session_option
from .output import chunk_to_output, echo_json, print_chunk


def _show_current(session: Session, as_json: bool, extra: Optional[dict] = None) -> None:
    chunk = session.current_chunk
    total = len(session.chunk_buffer)
    if as_json:
        echo_json(chunk_to_output(chunk, total, session.has_more_chunks, extra))
    else:
        print_chunk(chunk, total, session.has_more_chunks)


def next_chunk(
    ctx: typer.Context,
    as_json: bool = json_option(),
    raw: bool = typer.Option(False, "--raw", help="Output raw chunk content for piping/scripts"),
    session_id: Optional[str] = session_option(),
) -> None:
    """
    Advance to the next chunk and print it.

    With --raw nothing is printed once the last chunk has been reached, so
    a script can loop until the output is empty.
    """
    try:
        with open_session(ctx, session_id) as session:
            chunk = session.advance()
    except COMMAND_ERRORS as e:
        if raw:
            raise typer.Exit(1)
        if as_json:
            echo_json({"error": str(e)})
            raise typer.Exit(1)
        exit_with_error(e)

    if chunk is None:
        if raw:
            return
        if as_json:
            echo_json({"done": True, "message": "No more chunks"})
            return
        rprint("[yellow]No more chunks.[/yellow] All chunks have been processed.")
        rprint(f"Total chunks: {len(session.chunk_buffer)}")
        rprint(f"Stored results: {len(session.results)}")
        rprint("Use [cyan]rlm aggregate[/cyan] to combine results.")
        return

    if raw:
        typer.echo(chunk.content)
        return
    _show_current(session, as_json)


def skip(
    ctx: typer.Context,
    count: int = typer.Argument(..., help="Number of chunks to skip (positive = forward, negative = backward)"),
    skip_empty: bool = typer.Option(False, "--skip-empty", help="Also skip chunks shorter than 100 characters"),
    as_json: bool = json_option(),
    session_id: Optional[str] = session_option(),
) -> None:
    """
    Move forward or backward by COUNT chunks.

    Use "--" before a negative count: rlm skip -- -2
    """
    try:
        with open_session(ctx, session_id) as session:
            moved = session.skip(count, skip_empty=skip_empty)
    except COMMAND_ERRORS as e:
        exit_with_error(e)

    if as_json:
        _show_current(session, True, {"skipped": str(moved)})
        return
    rprint(f"[dim]Skipped {moved} chunk(s)[/dim]")
    typer.echo("")
    _show_current(session, False)


def jump(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Target chunk number (1-based) or percentage with % suffix (e.g. 50%)"),
    as_json: bool = json_option(),
    session_id: Optional[str] = session_option(),
) -> None:
    """Jump to a chunk by number or by position in percent."""
    try:
        with open_session(ctx, session_id) as session:
            previous = session.current_index
            session.jump(target)
    except COMMAND_ERRORS as e:
        exit_with_error(e)

    if as_json:
        _show_current(session, True, {"jumpedFrom": str(previous + 1)})
        return
    rprint(f"[dim]Jumped from chunk {previous + 1} to {session.current_index + 1}[/dim]")
    typer.echo("")
    _show_current(session, False)
