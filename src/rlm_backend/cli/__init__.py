"""
CLI package for the RLM backend.

This package provides the `rlm` command-line interface built with typer and rich.
"""

from .cli import app, cli_main

__all__ = ["app", "cli_main"]
