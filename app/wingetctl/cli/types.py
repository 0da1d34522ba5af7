"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum

import typer

from wingetctl.core.catalog import CatalogError, CatalogStore
from wingetctl.core.config import ConfigError, Settings, load_settings
from wingetctl.models.package import Package
from wingetctl.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def get_settings(ctx: typer.Context) -> Settings:
    """Return the settings loaded by the main callback, loading them if needed.

    Raises:
        typer.Exit: If the settings file is invalid.
    """
    obj = ctx.ensure_object(dict)
    settings = obj.get("settings")
    if isinstance(settings, Settings):
        return settings

    try:
        settings = load_settings(obj.get("config_path"))
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    obj["settings"] = settings
    return settings


def is_quiet(ctx: typer.Context) -> bool:
    """Check if --quiet was passed to the main command."""
    return bool(ctx.ensure_object(dict).get("quiet", False))


def load_catalog_or_exit(store: CatalogStore) -> list[Package]:
    """Load the merged catalog or exit with a helpful error message.

    Raises:
        typer.Exit: If a catalog file cannot be read.
    """
    try:
        return store.load_merged()
    except CatalogError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
