"""Install, uninstall and upgrade commands.

Each command queues one action per package id, runs the queue to
completion, and refreshes the catalog status of packages whose action
completed.
"""

from typing import Annotated

import typer

from wingetctl.cli.types import get_settings, is_quiet, load_catalog_or_exit
from wingetctl.core.catalog import CatalogStore
from wingetctl.core.executor import (
    CatalogRefresher,
    build_operator,
    build_resolver,
    run_actions,
    save_catalog_quietly,
)
from wingetctl.core.queue import OperationQueue, QueueEvent
from wingetctl.models.queue import QueueAction, QueueItemStatus, QueueItemView
from wingetctl.utils.formatting import (
    console,
    create_queue_table,
    format_queue_row,
    print_error,
    print_info,
    print_success,
    print_warning,
)

PackageIds = Annotated[list[str], typer.Argument(help="Package ids, processed in order.")]
AssumeYes = Annotated[
    bool,
    typer.Option("--yes", "-y", help="Do not ask for confirmation."),
]


def _print_transition(item: QueueItemView) -> None:
    if item.status == QueueItemStatus.RUNNING:
        console.print(f"[status.running]→[/] {item.action.value} {item.package_id} ...")
    elif item.is_terminal:
        console.print(
            f"  [status.{item.status.value}]{item.status.value}[/] "
            f"{item.action.value} {item.package_id}"
        )


def _confirm(action: QueueAction, package_ids: list[str]) -> None:
    listing = ", ".join(package_ids)
    if not typer.confirm(f"{action.value.capitalize()} {listing}?", default=True):
        print_info("Aborted.")
        raise typer.Exit(code=0)


def run_action_command(
    ctx: typer.Context,
    action: QueueAction,
    package_ids: list[str],
    assume_yes: bool,
) -> None:
    """Shared implementation of the install/uninstall/upgrade commands.

    Raises:
        typer.Exit: With code 1 if winget is missing or any action failed,
            130 if interrupted.
    """
    settings = get_settings(ctx)
    operator = build_operator(settings)

    if not operator.is_available():
        print_error(f"winget is not available ('{settings.executable}' not found).")
        raise typer.Exit(code=1)

    # Keep order, drop duplicates
    requested = list(dict.fromkeys(package_ids))

    if not assume_yes:
        _confirm(action, requested)

    store = CatalogStore()
    packages = load_catalog_or_exit(store)
    refresher = CatalogRefresher(build_resolver(settings), packages)
    quiet = is_quiet(ctx)

    with OperationQueue(operator) as queue:
        queue.subscribe(QueueEvent.COMPLETED, refresher)
        try:
            results = run_actions(
                queue,
                [(package_id, action) for package_id in requested],
                on_status=None if quiet else _print_transition,
            )
        except KeyboardInterrupt:
            print_warning("Interrupted, canceling remaining items...")
            for item in queue.get_queue():
                if not item.is_terminal:
                    queue.cancel(item)
            queue.wait_idle(timeout=30.0)
            raise typer.Exit(code=130) from None

    if refresher.refreshed:
        save_catalog_quietly(store, packages)

    if not quiet:
        table = create_queue_table(f"{action.value.capitalize()} Results")
        for item in results:
            table.add_row(*format_queue_row(item))
        console.print(table)

    failed = [item for item in results if item.status == QueueItemStatus.FAILED]
    if failed:
        print_error(f"{len(failed)} of {len(results)} {action.value} action(s) failed.")
        raise typer.Exit(code=1)

    completed = sum(1 for item in results if item.status == QueueItemStatus.COMPLETED)
    print_success(f"{completed} of {len(results)} {action.value} action(s) completed.")


def install(ctx: typer.Context, package_ids: PackageIds, assume_yes: AssumeYes = False) -> None:
    """Install packages with winget, one at a time.

    Examples:
        wingetctl install Google.Chrome 7zip.7zip
        wingetctl install -y Discord.Discord
    """
    run_action_command(ctx, QueueAction.INSTALL, package_ids, assume_yes)


def uninstall(ctx: typer.Context, package_ids: PackageIds, assume_yes: AssumeYes = False) -> None:
    """Uninstall packages with winget, one at a time."""
    run_action_command(ctx, QueueAction.UNINSTALL, package_ids, assume_yes)


def upgrade(ctx: typer.Context, package_ids: PackageIds, assume_yes: AssumeYes = False) -> None:
    """Upgrade packages to their newest version, one at a time."""
    run_action_command(ctx, QueueAction.UPGRADE, package_ids, assume_yes)
