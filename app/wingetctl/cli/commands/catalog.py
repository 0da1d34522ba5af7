"""Catalog command implementation.

Lists the tracked packages and manages the user catalog.
"""

from typing import Annotated

import typer

from wingetctl.cli.types import get_settings, load_catalog_or_exit
from wingetctl.core.catalog import CatalogError, CatalogStore
from wingetctl.core.executor import build_resolver
from wingetctl.models.package import Package
from wingetctl.utils.formatting import (
    console,
    create_package_table,
    format_package_row,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Manage the package catalog.",
    no_args_is_help=True,
)


@app.command("list")
def list_packages(
    category: Annotated[
        str | None,
        typer.Option("--category", "-c", help="Only show packages in this category."),
    ] = None,
    search: Annotated[
        str | None,
        typer.Option("--search", "-s", help="Filter by name or id (case-insensitive)."),
    ] = None,
) -> None:
    """List catalog packages with their last known status."""
    packages = load_catalog_or_exit(CatalogStore())

    if category:
        packages = [pkg for pkg in packages if pkg.category.lower() == category.lower()]
    if search:
        needle = search.lower()
        packages = [
            pkg for pkg in packages if needle in pkg.id.lower() or needle in pkg.name.lower()
        ]

    if not packages:
        print_info("No packages match.")
        return

    packages.sort(key=lambda pkg: (pkg.category.lower(), pkg.display_name.lower()))
    table = create_package_table(f"Catalog ({len(packages)} packages)")
    for pkg in packages:
        table.add_row(*format_package_row(pkg))
    console.print(table)


@app.command("add")
def add_package(
    ctx: typer.Context,
    package_id: Annotated[str, typer.Argument(help="winget package id, e.g. Git.Git.")],
    name: Annotated[str | None, typer.Option("--name", "-n", help="Display name.")] = None,
    category: Annotated[str, typer.Option("--category", "-c", help="Category.")] = "",
    tags: Annotated[
        list[str] | None,
        typer.Option("--tag", "-t", help="Tag (repeatable)."),
    ] = None,
    lookup: Annotated[
        bool,
        typer.Option(
            "--lookup/--no-lookup",
            help="Fill in name and description from 'winget show'.",
        ),
    ] = True,
) -> None:
    """Add a package to the user catalog."""
    package = Package(id=package_id, name=name or "", category=category, tags=list(tags or []))

    if lookup:
        details = build_resolver(get_settings(ctx)).details(package_id)
        if details is None:
            print_warning(f"winget has no details for {package_id}; adding it as-is.")
        else:
            package.name = package.name or details.name
            package.description = details.description

    try:
        added = CatalogStore().add_custom(package)
    except CatalogError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not added:
        print_warning(f"{package_id} is already in the catalog.")
        return
    print_success(f"Added {package.display_name} ({package_id}) to the catalog.")


@app.command("remove")
def remove_package(
    package_id: Annotated[str, typer.Argument(help="Package id to remove.")],
) -> None:
    """Remove a package from the user catalog."""
    try:
        removed = CatalogStore().remove_custom(package_id)
    except CatalogError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not removed:
        print_error(f"{package_id} is not a user-added package.")
        raise typer.Exit(code=1)
    print_success(f"Removed {package_id} from the catalog.")
