"""Execution orchestration for queued package actions.

Provides factory functions that build the winget collaborators from
settings, and the routine shared by the install/uninstall/upgrade CLI
commands: queue the actions, wait for the queue, then refresh the
catalog status of every package whose action completed.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from wingetctl.core.catalog import CatalogError, CatalogStore, find_package
from wingetctl.core.queue import Listener, OperationQueue, QueueEvent
from wingetctl.core.resolver import PackageInfoResolver
from wingetctl.models.package import Package
from wingetctl.operators.winget import WingetOperator
from wingetctl.scanners.winget import WingetScanner

if TYPE_CHECKING:
    from wingetctl.core.config import Settings
    from wingetctl.models.queue import QueueAction, QueueItemView

logger = logging.getLogger(__name__)


def build_scanner(settings: Settings) -> WingetScanner:
    """Create the query-side winget wrapper from settings."""
    return WingetScanner(executable=settings.executable, timeout=settings.query_timeout)


def build_operator(settings: Settings) -> WingetOperator:
    """Create the winget action operator from settings."""
    return WingetOperator(
        executable=settings.executable,
        timeout=settings.action_timeout,
        accept_agreements=settings.accept_agreements,
    )


def build_resolver(settings: Settings) -> PackageInfoResolver:
    """Create a resolver backed by a scanner built from settings."""
    return PackageInfoResolver(build_scanner(settings))


class CatalogRefresher:
    """Refreshes catalog status after queue items complete.

    Subscribed to QueueEvent.COMPLETED only, so failed or canceled
    actions never trigger a re-query.

    Attributes:
        resolver: Resolver used to re-query status.
        packages: Catalog packages to update in place.
        refreshed: Ids refreshed so far, in completion order.
    """

    def __init__(self, resolver: PackageInfoResolver, packages: list[Package]) -> None:
        self.resolver = resolver
        self.packages = packages
        self.refreshed: list[str] = []
        self._lock = threading.Lock()

    def __call__(self, item: QueueItemView) -> None:
        logger.info(
            "Queue item completed: %s on %s, refreshing status",
            item.action.value,
            item.package_id,
        )
        with self._lock:
            package = find_package(self.packages, item.package_id)
            if package is None:
                # Not tracked yet; track it so its new status is visible
                package = Package(id=item.package_id)
                self.packages.append(package)
            if self.resolver.refresh(package):
                self.refreshed.append(package.id)


def run_actions(
    queue: OperationQueue,
    requests: list[tuple[str, QueueAction]],
    *,
    on_status: Listener | None = None,
    timeout: float | None = None,
) -> list[QueueItemView]:
    """Queue package actions and wait until the queue is idle.

    Args:
        queue: Queue to run the actions on.
        requests: (package_id, action) pairs in the order to run them.
        on_status: Optional STATUS_CHANGED listener for the duration of the run.
        timeout: Maximum time to wait for the queue to become idle.

    Returns:
        Final snapshots of the queued items, in request order.
    """
    unsubscribe = queue.subscribe(QueueEvent.STATUS_CHANGED, on_status) if on_status else None
    try:
        queued = [queue.enqueue(package_id, action) for package_id, action in requests]
        if not queue.wait_idle(timeout):
            logger.warning("Queue did not finish within %s seconds", timeout)
    finally:
        if unsubscribe is not None:
            unsubscribe()

    results: list[QueueItemView] = []
    for view in queued:
        current = queue.get_item(view.item_id)
        results.append(current if current is not None else view)
    return results


def save_catalog_quietly(store: CatalogStore, packages: list[Package]) -> bool:
    """Save the catalog, logging instead of raising on failure.

    Errors during the save are logged but do **not** interrupt the calling
    command's flow.

    Returns:
        True if the catalog was written.
    """
    try:
        store.save(packages)
    except (CatalogError, OSError) as e:
        logger.warning("Failed to save catalog: %s", e)
        return False
    return True
