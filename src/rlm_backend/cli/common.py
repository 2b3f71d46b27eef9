"""
Shared state and helpers for the RLM CLI commands.

Commands reach the configuration manager and the session store through the
typer context object that the main callback fills in. Sessions are loaded
at the start of a command and saved once at the end; a command that fails
leaves the stored session untouched.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import typer
from rich import print as rprint
from rich.markup import escape

from ..core.session import Session
from ..exceptions import (
    ChunkingCancelledError,
    ConfigurationError,
    InvalidArgumentError,
    PreconditionNotMetError,
    RlmError,
)
from ..services import SessionStore
from ..utils.config import ConfigManager

logger = logging.getLogger(__name__)

SESSION_OPTION_HELP = "Session identifier for state isolation (default session when omitted)"


def session_option() -> Any:
    return typer.Option(None, "--session", help=SESSION_OPTION_HELP, metavar="ID")


def json_option() -> Any:
    return typer.Option(False, "--json", "-j", help="Output in JSON format for machine parsing")


def _state(ctx: typer.Context) -> Dict[str, Any]:
    root = ctx.find_root()
    if root.obj is None:
        root.obj = {"config_path": None, "verbose": False, "log_file": None}
    return root.obj


def get_config_manager(ctx: typer.Context) -> ConfigManager:
    """
    Get the configuration manager for this invocation, loading it on first use.

    Raises:
        ConfigurationError: If the configuration cannot be loaded
    """
    state = _state(ctx)
    manager = state.get("config_manager")
    if manager is None:
        manager = ConfigManager(config_file=state.get("config_path"), load_env=True)
        manager.load_config()
        state["config_manager"] = manager
    return manager


def get_session_store(ctx: typer.Context) -> SessionStore:
    state = _state(ctx)
    store = state.get("session_store")
    if store is None:
        store = SessionStore(get_config_manager(ctx).session_directory())
        state["session_store"] = store
    return store


@contextmanager
def open_session(ctx: typer.Context, session_id: Optional[str], save: bool = True) -> Iterator[Session]:
    """
    Load a session for the duration of a command.

    The session is saved when the block completes without an exception.

    Example:
        with open_session(ctx, session_id) as session:
            session.store_result(key, value)
    """
    store = get_session_store(ctx)
    session = store.load(session_id)
    yield session
    if save:
        store.save(session, session_id)


def handle_cli_error(error: BaseException) -> None:
    """
    Handle CLI errors with user-friendly messages.

    Args:
        error: The exception that occurred
    """
    message = escape(str(error))
    if isinstance(error, ConfigurationError):
        rprint(f"[red]Configuration Error:[/red] {message}")
        logger.debug("Configuration error details", exc_info=True)
    elif isinstance(error, InvalidArgumentError):
        rprint(f"[red]Invalid Argument:[/red] {message}")
    elif isinstance(error, PreconditionNotMetError):
        rprint(f"[red]Error:[/red] {message}")
    elif isinstance(error, FileNotFoundError):
        rprint(f"[red]File Not Found:[/red] {message}")
        logger.debug("File not found details", exc_info=True)
    elif isinstance(error, PermissionError):
        rprint(f"[red]Permission Denied:[/red] {message}")
        logger.debug("Permission error details", exc_info=True)
    else:
        rprint(f"[red]Error:[/red] {message}")
        logger.debug("Unexpected error details", exc_info=True)


def exit_with_error(error: BaseException) -> None:
    """Report an error and stop the command with the matching exit code."""
    if isinstance(error, ChunkingCancelledError):
        rprint("\n[yellow]Operation cancelled by user[/yellow]")
        raise typer.Exit(130)
    handle_cli_error(error)
    raise typer.Exit(1)


# Errors that commands report instead of crashing
COMMAND_ERRORS = (RlmError, FileNotFoundError, PermissionError)
