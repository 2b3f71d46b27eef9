"""
Result commands for the RLM CLI: store, results, aggregate and import.
"""

import sys
from typing import Optional

import typer
from rich import print as rprint
from rich.markup import escape

from ..core.session import aggregate_results
from ..services import import_results
from .common import (
    COMMAND_ERRORS,
    exit_with_error,
    get_config_manager,
    get_session_store,
    json_option,
    open_session,
    session_option,
)
from .output import echo_json, print_results_table


def store(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key that identifies the result (e.g. 'chunk_0', 'section_intro')"),
    value: str = typer.Argument(..., help="Result value to store, or '-' to read it from stdin"),
    session_id: Optional[str] = session_option(),
) -> None:
    """Store a result under KEY. Storing the same key again replaces the value."""
    if value == "-":
        value = sys.stdin.read()

    try:
        with open_session(ctx, session_id) as session:
            session.store_result(key, value)
    except COMMAND_ERRORS as e:
        exit_with_error(e)

    rprint(f"[green]Stored:[/green] {escape(key)}")
    rprint(f"[cyan]Total results:[/cyan] {len(session.results)}")
    if session.has_more_chunks:
        rprint("[dim]Use [cyan]rlm next[/cyan] to get the next chunk.[/dim]")
    elif session.has_chunks:
        rprint("[dim]All chunks processed. Use [cyan]rlm aggregate[/cyan] to combine results.[/dim]")


def results(
    ctx: typer.Context,
    as_json: bool = json_option(),
    session_id: Optional[str] = session_option(),
) -> None:
    """List stored results."""
    try:
        with open_session(ctx, session_id, save=False) as session:
            stored = dict(session.results)
    except COMMAND_ERRORS as e:
        exit_with_error(e)

    if as_json:
        echo_json(stored)
        return

    if not stored:
        rprint("[yellow]No results stored.[/yellow]")
        rprint("Use [cyan]rlm store <key> <value>[/cyan] to store results.")
        return

    rprint(f"[cyan]Stored results:[/cyan] {len(stored)}")
    typer.echo("")
    print_results_table(stored)


def aggregate(
    ctx: typer.Context,
    separator: Optional[str] = typer.Option(
        None, "--separator", "-s", help="Separator between results (default: a line of dashes)"
    ),
    final: bool = typer.Option(False, "--final", "-f", help="Tag the output FINAL for completion detection"),
    as_json: bool = json_option(),
    raw: bool = typer.Option(False, "--raw", help="Output the combined text only, for piping/scripts"),
    session_id: Optional[str] = session_option(),
) -> None:
    """Combine all stored results into one text."""
    try:
        with open_session(ctx, session_id, save=False) as session:
            if separator is None:
                separator = get_config_manager(ctx).results_separator()
            output = aggregate_results(session, separator, final)
    except COMMAND_ERRORS as e:
        exit_with_error(e)

    if output.result_count == 0:
        if raw:
            return
        if as_json:
            echo_json({"error": "No results to aggregate"})
            return
        rprint("[yellow]No results to aggregate.[/yellow]")
        rprint("Use [cyan]rlm store <key> <value>[/cyan] to store results first.")
        return

    if raw:
        typer.echo(output.combined)
        return
    if as_json:
        echo_json(output.to_dict())
        return

    rprint(f"[cyan]Aggregating {output.result_count} results[/cyan]")
    typer.echo("")
    if output.is_final:
        typer.echo(f"{output.signal}(")
        typer.echo(output.combined)
        typer.echo(")")
    else:
        typer.echo(output.combined)


def import_command(
    ctx: typer.Context,
    pattern: str = typer.Argument(..., help="Glob pattern for result files (e.g. 'results/*.txt')"),
    session_id: Optional[str] = session_option(),
) -> None:
    """
    Import results from files matching a pattern.

    Plain files are stored under their file name without extension. Child
    session files (rlm-session-<id>.json) are stored under <id> with their
    combined results.
    """
    try:
        with open_session(ctx, session_id) as session:
            report = import_results(session, pattern, get_session_store(ctx))
    except COMMAND_ERRORS as e:
        exit_with_error(e)

    if not report.imported and not report.skipped:
        rprint(f"[yellow]No files found matching:[/yellow] {escape(pattern)}")
        return

    for key in report.imported:
        rprint(f"  [green]+[/green] {escape(key)}")
    for key in report.skipped:
        rprint(f"  [red]![/red] {escape(key)} skipped")
    typer.echo("")
    rprint(f"[green]Imported {report.imported_count} result(s).[/green]")
    rprint(f"[cyan]Total results:[/cyan] {len(session.results)}")
