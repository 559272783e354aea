"""Command registration utilities for the ytclip CLI."""

from __future__ import annotations

import typer
from rich.console import Console

from ytclip.cli.commands import clips


def register_commands(app: typer.Typer, console: Console) -> None:
    """Attach command groups to the provided Typer application."""

    clips.register(app, console)


__all__ = ["register_commands"]
