"""
Document commands for the RLM CLI: load, info and slice.
"""

import time
from typing import Optional

import typer
from rich import print as rprint

from ..core.session import parse_slice_range
from ..services import load_document
from .common import COMMAND_ERRORS, exit_with_error, json_option, open_session, session_option
from .output import echo_json, print_document_info, print_session_info, session_info_output


def load(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="File path, directory path, or '-' for stdin"),
    pattern: Optional[str] = typer.Option(
        None,
        "--pattern",
        "-p",
        help="Glob pattern for filtering files when loading a directory (e.g. '*.md', '**/*.txt')",
    ),
    merge: bool = typer.Option(
        False,
        "--merge",
        help="When loading a directory, merge all matching files into one document",
    ),
    session_id: Optional[str] = session_option(),
) -> None:
    """
    Load a document into the session.

    Loading replaces the previous document and its chunks. Stored results
    and the recursion depth are kept.

    Example:
        rlm load docs/ --pattern "*.md" --merge
    """
    started = time.perf_counter()
    try:
        document = load_document(source, pattern=pattern, merge=merge)
        with open_session(ctx, session_id) as session:
            session.load_document(document)
    except COMMAND_ERRORS as e:
        exit_with_error(e)

    print_document_info(document.metadata, (time.perf_counter() - started) * 1000)
    file_count = document.metadata.extended.get("fileCount")
    if file_count:
        rprint(f"[green]{file_count} document(s) loaded successfully.[/green]")
    else:
        rprint("[green]Document loaded successfully.[/green]")


def info(
    ctx: typer.Context,
    as_json: bool = json_option(),
    progress: bool = typer.Option(False, "--progress", help="Show processing progress summary"),
    session_id: Optional[str] = session_option(),
) -> None:
    """Show the loaded document, chunk position, recursion depth and stored results."""
    try:
        with open_session(ctx, session_id, save=False) as session:
            pass
    except COMMAND_ERRORS as e:
        exit_with_error(e)

    if as_json:
        echo_json(session_info_output(session))
        return

    if not session.has_document:
        rprint("[yellow]No document loaded.[/yellow] Use [cyan]rlm load <file>[/cyan] to load a document.")
        return

    print_session_info(session, show_progress=progress)


def slice_document(
    ctx: typer.Context,
    range_spec: str = typer.Argument(..., metavar="RANGE", help="Slice range (e.g. '0:1000', '-500:', ':1000')"),
    session_id: Optional[str] = session_option(),
) -> None:
    """
    Print part of the loaded document by character range.

    Negative offsets count from the end of the document, as in Python slices.
    """
    try:
        with open_session(ctx, session_id, save=False) as session:
            session.require_document()
            start, end = parse_slice_range(range_spec, len(session.content))
    except COMMAND_ERRORS as e:
        exit_with_error(e)

    text = session.content[start:end]
    rprint(f"[cyan]Slice:[/cyan] {start:,}..{end:,} ({len(text):,} chars)")
    typer.echo("")
    typer.echo(text)
