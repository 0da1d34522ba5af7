"""Status command implementation.

Resolves installed and available versions for catalog packages.
"""

import json
from dataclasses import asdict
from typing import Annotated, Any

import typer
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from wingetctl.cli.types import OutputFormat, get_settings, is_quiet, load_catalog_or_exit
from wingetctl.core.catalog import CatalogStore, find_package
from wingetctl.core.executor import build_resolver, save_catalog_quietly
from wingetctl.models.package import Package
from wingetctl.utils.formatting import (
    console,
    create_package_table,
    err_console,
    format_package_row,
    print_error,
    print_info,
    print_warning,
)


def _package_to_json(package: Package) -> dict[str, Any]:
    data = asdict(package)
    data["last_checked"] = package.last_checked.isoformat() if package.last_checked else None
    data["status"] = package.status_label
    return data


def _select_targets(packages: list[Package], package_ids: list[str]) -> list[Package]:
    """Pick the packages to refresh; unknown ids get an untracked Package."""
    if not package_ids:
        return packages
    targets: list[Package] = []
    for package_id in package_ids:
        package = find_package(packages, package_id)
        targets.append(package if package is not None else Package(id=package_id))
    return targets


def show_status(
    ctx: typer.Context,
    package_ids: Annotated[
        list[str] | None,
        typer.Argument(help="Package ids to check. Defaults to the whole catalog."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    updates_only: Annotated[
        bool,
        typer.Option(
            "--updates-only",
            "-u",
            help="Only show packages with an update available.",
        ),
    ] = False,
    no_save: Annotated[
        bool,
        typer.Option(
            "--no-save",
            help="Do not write the refreshed status back to the catalog.",
        ),
    ] = False,
) -> None:
    """Check which catalog packages are installed and up to date.

    Examples:
        wingetctl status                      # Check the whole catalog
        wingetctl status Google.Chrome        # Check one package
        wingetctl status --updates-only       # Only outdated packages
        wingetctl status --format json        # Output as JSON
    """
    settings = get_settings(ctx)
    resolver = build_resolver(settings)

    if not resolver.scanner.is_available():
        print_error(f"winget is not available ('{settings.executable}' not found or not working).")
        raise typer.Exit(code=1)

    store = CatalogStore()
    packages = load_catalog_or_exit(store)
    targets = _select_targets(packages, package_ids or [])

    if not targets:
        print_warning("The catalog is empty. Add packages with 'wingetctl catalog add'.")
        raise typer.Exit(code=0)

    show_progress = output_format == OutputFormat.TABLE and not is_quiet(ctx)
    with Progress(
        TextColumn("[info]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=err_console,
        transient=True,
        disable=not show_progress,
    ) as progress:
        task = progress.add_task("Checking packages", total=len(targets))

        def on_progress(done: int, total: int, package: Package) -> None:
            progress.update(task, completed=done, description=f"Checked {package.display_name}")

        refreshed = resolver.refresh_all(targets, on_progress=on_progress)

    if refreshed < len(targets):
        print_warning(f"Status unknown for {len(targets) - refreshed} package(s).")

    shown = [pkg for pkg in targets if pkg.update_available] if updates_only else targets

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps([_package_to_json(pkg) for pkg in shown]))
    elif shown:
        table = create_package_table("Package Status")
        for pkg in shown:
            table.add_row(*format_package_row(pkg))
        console.print(table)
    elif updates_only:
        print_info("All checked packages are up to date.")

    if not no_save and refreshed:
        save_catalog_quietly(store, packages)
