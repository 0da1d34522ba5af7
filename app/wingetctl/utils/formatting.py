"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from wingetctl.core.theme import get_theme

if TYPE_CHECKING:
    from wingetctl.models.package import Package
    from wingetctl.models.queue import QueueItemView


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def configure_logging(verbose: bool = False) -> None:
    """Route wingetctl log records to stderr through Rich.

    Args:
        verbose: Show DEBUG records; otherwise only warnings and errors.
    """
    root = logging.getLogger("wingetctl")
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    handler = RichHandler(console=err_console, show_path=verbose, rich_tracebacks=verbose)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


def create_package_table(title: str = "Packages") -> Table:
    """Create a pre-configured table for displaying package status.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for package display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("", width=2, justify="center")
    table.add_column("Package", no_wrap=True)
    table.add_column("Id", style="muted", no_wrap=True)
    table.add_column("Installed", style="text")
    table.add_column("Available", style="text")
    table.add_column("Source", style="info")
    table.add_column("Category", style="muted")
    return table


def format_package_row(pkg: Package) -> tuple[str, str, str, str, str, str, str]:
    """Format a package as a table row with status styling.

    Args:
        pkg: The package to format.

    Returns:
        Tuple of (icon, name, id, installed, available, source, category).
    """
    if pkg.update_available:
        icon = "[update]↑[/]"  # Up arrow
        name = f"[update]{pkg.display_name}[/]"
        available = f"[update]{pkg.available_version}[/]"
    elif pkg.is_installed:
        icon = "[installed]●[/]"  # Filled circle
        name = f"[installed]{pkg.display_name}[/]"
        available = f"[muted]{pkg.available_version or '-'}[/]"
    else:
        icon = "[not_installed]○[/]"  # Empty circle
        name = f"[not_installed]{pkg.display_name}[/]"
        available = "[muted]-[/]"

    installed = pkg.installed_version or ("?" if pkg.is_installed else "-")
    return (icon, name, pkg.id, installed, available, pkg.source, pkg.category or "-")


def create_queue_table(title: str = "Queue") -> Table:
    """Create a pre-configured table for displaying queue items."""
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", width=10)
    table.add_column("Package", no_wrap=True)
    table.add_column("Status", width=10)
    table.add_column("Message", style="muted", overflow="fold")
    return table


def format_queue_row(item: QueueItemView) -> tuple[str, str, str, str]:
    """Format a queue item as a table row.

    Returns:
        Tuple of (action, package, status, message) with Rich markup.
    """
    status = f"[status.{item.status.value}]{item.status.value}[/]"
    return (item.action.value, item.package_id, status, item.last_message or "")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
