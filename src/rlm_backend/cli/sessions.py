"""
Session commands for the RLM CLI: clear, spawn and the depth group.

spawn and depth are the hooks an external orchestrator uses for recursive
decomposition: a child session is created per chunk, processed by another
worker, and its results are imported back with `rlm import`.
"""

from typing import Optional

import typer
from rich import print as rprint
from rich.markup import escape

from ..core.session import child_session_id
from ..services import validate_session_id
from .common import (
    COMMAND_ERRORS,
    exit_with_error,
    get_session_store,
    json_option,
    open_session,
    session_option,
)
from .output import echo_json

depth_app = typer.Typer(
    name="depth",
    help="Inspect and change the recursion depth of a session",
    rich_markup_mode="rich",
)


def clear(
    ctx: typer.Context,
    all_sessions: bool = typer.Option(False, "--all", help="Delete every session file in the session directory"),
    session_id: Optional[str] = session_option(),
) -> None:
    """Clear the session: unload the document, drop chunks and results, reset depth."""
    try:
        store = get_session_store(ctx)
        if all_sessions:
            removed = store.delete_all()
        else:
            session = store.load(session_id)
            had_document = session.has_document
            had_chunks = session.has_chunks
            had_results = bool(session.results)
            session.clear()
            store.delete(session_id)
    except COMMAND_ERRORS as e:
        exit_with_error(e)

    if all_sessions:
        rprint(f"[green]Removed {removed} session file(s).[/green]")
        return

    if not (had_document or had_chunks or had_results):
        rprint("[yellow]Session was already empty.[/yellow]")
        return

    rprint("[green]Session cleared.[/green]")
    if had_document:
        rprint("[dim]- Document unloaded[/dim]")
    if had_chunks:
        rprint("[dim]- Chunk buffer cleared[/dim]")
    if had_results:
        rprint("[dim]- Results removed[/dim]")


def spawn(
    ctx: typer.Context,
    branch: str = typer.Argument(..., help="Branch name appended to the child session id (e.g. the chunk number)"),
    as_json: bool = json_option(),
    session_id: Optional[str] = session_option(),
) -> None:
    """
    Create a child session holding the current chunk as its document.

    The child is saved as <session>-child-<branch> one recursion level
    deeper. When that level exceeds the maximum the child is still created
    and the output says so; the caller should then process the chunk inline.
    """
    try:
        with open_session(ctx, session_id, save=False) as session:
            child, exceeded = session.spawn_child()
        child_id = validate_session_id(child_session_id(validate_session_id(session_id), branch))
        get_session_store(ctx).save(child, child_id)
    except COMMAND_ERRORS as e:
        exit_with_error(e)

    if as_json:
        echo_json({
            "childSession": child_id,
            "recursionDepth": child.recursion_depth,
            "maxRecursionDepth": child.max_recursion_depth,
            "exceeded": exceeded,
            "source": child.metadata.source,
            "length": len(child.content),
        })
        return

    rprint(f"[green]Spawned child session[/green] [cyan]{escape(child_id)}[/cyan]")
    rprint(f"[cyan]Source:[/cyan] {escape(child.metadata.source)} ({len(child.content):,} chars)")
    rprint(f"[cyan]Recursion depth:[/cyan] {child.recursion_depth} / {child.max_recursion_depth}")
    if exceeded:
        rprint("[yellow]Recursion limit exceeded.[/yellow] Process this chunk inline instead of delegating.")


def _print_depth(recursion_depth: int, max_depth: int, exceeded: bool, as_json: bool) -> None:
    if as_json:
        echo_json({"recursionDepth": recursion_depth, "maxRecursionDepth": max_depth, "exceeded": exceeded})
        return
    rprint(f"[cyan]Recursion depth:[/cyan] {recursion_depth} / {max_depth}")
    if exceeded:
        rprint("[yellow]Recursion limit exceeded.[/yellow] Process remaining work inline.")


@depth_app.command("show")
def depth_show(
    ctx: typer.Context,
    as_json: bool = json_option(),
    session_id: Optional[str] = session_option(),
) -> None:
    """Show the current recursion depth."""
    try:
        with open_session(ctx, session_id, save=False) as session:
            pass
    except COMMAND_ERRORS as e:
        exit_with_error(e)
    exceeded = session.recursion_depth > session.max_recursion_depth
    _print_depth(session.recursion_depth, session.max_recursion_depth, exceeded, as_json)


@depth_app.command("push")
def depth_push(
    ctx: typer.Context,
    as_json: bool = json_option(),
    session_id: Optional[str] = session_option(),
) -> None:
    """Enter one more level of recursion. Reports when the maximum is exceeded."""
    try:
        with open_session(ctx, session_id) as session:
            exceeded = session.increment_recursion_depth()
    except COMMAND_ERRORS as e:
        exit_with_error(e)
    _print_depth(session.recursion_depth, session.max_recursion_depth, exceeded, as_json)


@depth_app.command("pop")
def depth_pop(
    ctx: typer.Context,
    as_json: bool = json_option(),
    session_id: Optional[str] = session_option(),
) -> None:
    """Leave one level of recursion. The depth never goes below zero."""
    try:
        with open_session(ctx, session_id) as session:
            session.decrement_recursion_depth()
    except COMMAND_ERRORS as e:
        exit_with_error(e)
    exceeded = session.recursion_depth > session.max_recursion_depth
    _print_depth(session.recursion_depth, session.max_recursion_depth, exceeded, as_json)
