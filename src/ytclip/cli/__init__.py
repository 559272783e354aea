"""Command-line interface package for ytclip."""

from ytclip.cli.main import CLIApplication, create_app

__all__ = ["CLIApplication", "create_app"]
