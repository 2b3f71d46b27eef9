"""
RLM CLI Application.

Main entry point for the `rlm` command-line interface. Exposes document
loading, chunking, chunk navigation, result storage and aggregation, and
the session and recursion-depth hooks used by an external orchestrator.
"""

import logging
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console

from ..utils.logging_config import LogFormat, LoggingManager, LogLevel, rich_console_handler
from .chunking import chunk, filter_document
from .common import COMMAND_ERRORS, exit_with_error, get_config_manager, handle_cli_error
from .documents import info, load, slice_document
from .navigation import jump, next_chunk, skip
from .results import aggregate, import_command, results, store
from .sessions import clear, depth_app, spawn

# Log output goes to stderr so that stdout stays clean for --json and --raw
err_console = Console(stderr=True)

app = typer.Typer(
    name="rlm",
    help="Chunk large documents and process them step by step, with resumable sessions",
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("load")(load)
app.command("info")(info)
app.command("slice")(slice_document)
app.command("chunk")(chunk)
app.command("filter")(filter_document)
app.command("next")(next_chunk)
app.command("skip")(skip)
app.command("jump")(jump)
app.command("store")(store)
app.command("results")(results)
app.command("aggregate")(aggregate)
app.command("import")(import_command)
app.command("clear")(clear)
app.command("spawn")(spawn)
app.add_typer(depth_app, name="depth", help="Recursion depth of a session: show, push, pop")


def setup_logging(
    verbose: bool = False,
    level: str = "WARNING",
    log_file: Optional[str] = None,
    log_format: str = "standard",
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        verbose: Enable verbose (DEBUG) logging
        level: Log level name used when not verbose
        log_file: Optional file that receives log records as well
        log_format: Format of the log file (standard, json, detailed)

    Returns:
        Configured logger instance
    """
    log_level = LogLevel.DEBUG if verbose else LogLevel.from_name(level)

    LoggingManager(
        log_level=log_level,
        log_format=LogFormat(log_format),
        log_file=log_file,
        console_handler=rich_console_handler(err_console),
    )

    logger = logging.getLogger("rlm_backend")
    logger.setLevel(log_level.value)
    return logger


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(
        None,
        "--config-path",
        "-c",
        help="Path to configuration file (default: rlm.config.json, optional)",
        metavar="PATH",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging (DEBUG level)",
    ),
    log_file: Optional[str] = typer.Option(
        None,
        "--log-file",
        help="Also write log records to this file",
        metavar="PATH",
    ),
) -> None:
    """
    RLM CLI - process documents too large for one pass, chunk by chunk.

    Common workflow:
    • Load a document: rlm load report.md
    • Chunk it: rlm chunk --strategy semantic
    • Walk the chunks: rlm next, storing results with rlm store <key> <value>
    • Combine: rlm aggregate --final

    Sessions live in the home directory (RLM_SESSION_DIR overrides it); use
    --session ID on any command to keep separate sessions apart.
    """
    setup_logging(verbose)
    ctx.obj = {
        "config_path": config_path,
        "verbose": verbose,
        "log_file": log_file,
        "config_manager": None,
        "session_store": None,
    }

    try:
        config_manager = get_config_manager(ctx)
        config_log_file = config_manager.log_file()
        setup_logging(
            verbose,
            level=config_manager.log_level(),
            log_file=log_file or (str(config_log_file) if config_log_file else None),
            log_format=config_manager.log_format(),
        )
    except COMMAND_ERRORS as e:
        exit_with_error(e)


def cli_main() -> None:
    """
    Main CLI entry point with error handling.

    This function is called by the console script entry point.
    """
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt:
        rprint("\n[yellow]Operation cancelled by user[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        handle_cli_error(e)
        raise typer.Exit(1)


if __name__ == "__main__":
    cli_main()
