"""Package status resolution.

Combines winget queries with the text parsers to answer "is package X
installed, at which version, and is an update available". This is the
single source of truth for package status; nothing is cached, every call
re-queries winget.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from wingetctl.models.package import DEFAULT_SOURCE, Package
from wingetctl.scanners.parsing import (
    has_no_update,
    is_not_installed,
    parse_available_version,
    parse_installed_version,
    parse_show_details,
    parse_source,
)
from wingetctl.scanners.winget import WingetScanner

logger = logging.getLogger(__name__)

# Callback signature for batch refresh progress: (done, total, package)
ProgressCallback = Callable[[int, int, Package], None]


class PackageInfoResolver:
    """Resolves package status by querying and parsing winget output.

    Attributes:
        scanner: Query-side winget wrapper.
    """

    def __init__(self, scanner: WingetScanner | None = None) -> None:
        self.scanner = scanner if scanner is not None else WingetScanner()

    def resolve(
        self,
        package_id: str,
        cancel_event: threading.Event | None = None,
    ) -> Package | None:
        """Determine the current status of a package.

        A package that is not installed is a normal result. Any unexpected
        error is logged and reported as None ("status unknown").

        Args:
            package_id: Package identifier.
            cancel_event: Optional cooperative cancellation handle.

        Returns:
            A fresh Package carrying the resolved status, or None.
        """
        try:
            package = self._resolve(package_id, cancel_event)
        except Exception:
            logger.exception("Failed to resolve package %s", package_id)
            return None

        # Canceled queries come back empty and would read as "not installed"
        if cancel_event is not None and cancel_event.is_set():
            logger.warning("Resolution of %s canceled", package_id)
            return None
        return package

    def _resolve(self, package_id: str, cancel_event: threading.Event | None) -> Package:
        logger.info("Checking package %s", package_id)

        list_output = self.scanner.list_package(package_id, exact=True, cancel_event=cancel_event)

        # Exact id match misses ids registered under a suffixed variant
        # (e.g. Google.Chrome vs Google.Chrome.EXE)
        if is_not_installed(list_output):
            logger.info("Exact match failed for %s, trying partial match", package_id)
            list_output = self.scanner.list_package(
                package_id, exact=False, cancel_event=cancel_event
            )

        now = datetime.now(UTC)

        if is_not_installed(list_output):
            logger.debug("Package %s not installed", package_id)
            return Package(id=package_id, source=DEFAULT_SOURCE, last_checked=now)

        installed_version = parse_installed_version(list_output)
        source = parse_source(list_output)

        upgrade_output = self.scanner.check_upgrade(package_id, cancel_event=cancel_event)
        update_available = False
        available_version = installed_version

        if not has_no_update(upgrade_output):
            parsed = parse_available_version(upgrade_output)
            # An update claim without a parsed version is not reported
            if parsed and parsed != installed_version:
                update_available = True
                available_version = parsed

        logger.info(
            "Package %s scanned - Installed: %s, Available: %s",
            package_id,
            installed_version or "?",
            available_version or "?",
        )

        return Package(
            id=package_id,
            source=source,
            is_installed=True,
            installed_version=installed_version,
            available_version=available_version,
            update_available=update_available,
            last_checked=now,
        )

    def refresh(self, package: Package, cancel_event: threading.Event | None = None) -> bool:
        """Re-resolve a catalog package and copy the status onto it.

        Identity and catalog metadata are left alone. On failure the
        package is not modified.

        Args:
            package: Package to update in place.
            cancel_event: Optional cooperative cancellation handle.

        Returns:
            True if the package status was refreshed.
        """
        resolved = self.resolve(package.id, cancel_event)
        if resolved is None:
            return False

        package.source = resolved.source
        package.is_installed = resolved.is_installed
        package.installed_version = resolved.installed_version
        package.available_version = resolved.available_version
        package.update_available = resolved.update_available
        package.last_checked = resolved.last_checked
        return True

    def refresh_all(
        self,
        packages: Iterable[Package],
        cancel_event: threading.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> int:
        """Refresh packages one after another.

        Args:
            packages: Packages to refresh in place.
            cancel_event: Stops the batch before the next package when set.
            on_progress: Called after each package with (done, total, package).

        Returns:
            Number of packages that were refreshed successfully.
        """
        batch = list(packages)
        refreshed = 0
        for done, package in enumerate(batch, start=1):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Refresh canceled after %d of %d packages", done - 1, len(batch))
                break
            if self.refresh(package, cancel_event):
                refreshed += 1
            if on_progress is not None:
                on_progress(done, len(batch), package)
        return refreshed

    def details(
        self, package_id: str, cancel_event: threading.Event | None = None
    ) -> Package | None:
        """Look up catalog metadata for a package with `winget show`.

        Args:
            package_id: Package identifier.
            cancel_event: Optional cooperative cancellation handle.

        Returns:
            A Package with name and description filled in, or None if winget
            does not know the package.
        """
        try:
            fields = parse_show_details(self.scanner.show(package_id, cancel_event))
        except Exception:
            logger.exception("Failed to look up package %s", package_id)
            return None
        if not fields:
            return None
        return Package(
            id=fields.get("id") or package_id,
            name=fields.get("name", ""),
            description=fields.get("description", ""),
        )
