"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from pathlib import Path
from typing import Annotated

import typer

from wingetctl import __version__
from wingetctl.cli.commands import actions, catalog, doctor, status
from wingetctl.utils.formatting import configure_logging

# Create main Typer app
app = typer.Typer(
    name="wingetctl",
    help="Queue-driven package management on top of winget.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"wingetctl version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output (debug logging).",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Path to an alternative config.toml.",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """wingetctl - queue-driven package management on top of winget.

    Track a catalog of packages, see which are installed or outdated,
    and install, uninstall or upgrade them one at a time.
    """
    configure_logging(verbose=verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config_path


# Register commands
app.command("status")(status.show_status)
app.command("install")(actions.install)
app.command("uninstall")(actions.uninstall)
app.command("upgrade")(actions.upgrade)
app.command("doctor")(doctor.doctor)
app.add_typer(catalog.app, name="catalog")


if __name__ == "__main__":
    app()
