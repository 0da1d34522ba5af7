"""CLI commands for wingetctl.

This package contains all subcommand implementations.
"""

from wingetctl.cli.commands import actions, catalog, doctor, status

__all__ = ["actions", "catalog", "doctor", "status"]
