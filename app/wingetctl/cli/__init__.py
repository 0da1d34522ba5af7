"""CLI package for wingetctl.

This package contains the Typer application and all subcommands.
"""

from wingetctl.cli.main import app

__all__ = ["app"]
