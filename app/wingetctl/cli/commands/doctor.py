"""Doctor command implementation.

Reports whether winget is usable and where wingetctl keeps its files.
"""

import typer
from rich.table import Table

from wingetctl.cli.types import get_settings
from wingetctl.core.catalog import CatalogStore
from wingetctl.core.executor import build_scanner
from wingetctl.core.paths import get_config_path
from wingetctl.utils.formatting import console, print_error, print_success
from wingetctl.utils.shell import command_exists


def doctor(ctx: typer.Context) -> None:
    """Check the winget installation and show configuration paths."""
    settings = get_settings(ctx)
    scanner = build_scanner(settings)
    store = CatalogStore()

    on_path = command_exists(settings.executable)
    version = scanner.version() if on_path else ""

    table = Table(show_header=False, border_style="border")
    table.add_column("Check", style="bold_header")
    table.add_column("Value")
    table.add_row("Executable", settings.executable)
    table.add_row("On PATH", "[success]yes[/]" if on_path else "[error]no[/]")
    table.add_row("Version", version or "[muted]-[/]")
    table.add_row("Query timeout", f"{settings.query_timeout:g}s")
    table.add_row("Action timeout", f"{settings.action_timeout:g}s")
    table.add_row("Config", str(ctx.ensure_object(dict).get("config_path") or get_config_path()))
    table.add_row("Default catalog", str(store.default_path))
    table.add_row("User catalog", str(store.custom_path))
    console.print(table)

    if not version:
        print_error("winget did not answer --version.")
        raise typer.Exit(code=1)
    print_success(f"winget {version} is ready.")
