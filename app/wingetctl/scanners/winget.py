"""Query-side wrapper around the winget executable.

Runs the read-only winget verbs (list, upgrade check, show, --version)
and hands back their raw text. Every failure mode of the external
process collapses into an empty string, which callers treat as
"no information".
"""

import logging
import threading

from wingetctl.utils.shell import DEFAULT_TIMEOUT, command_exists, run_process

logger = logging.getLogger(__name__)

SOURCE_AGREEMENTS_FLAG = "--accept-source-agreements"


class WingetScanner:
    """Runs winget queries and returns their captured output.

    Attributes:
        executable: Name or path of the winget binary.
        timeout: Per-query timeout in seconds.

    Example:
        >>> scanner = WingetScanner()
        >>> if scanner.is_available():
        ...     print(scanner.list_package("Google.Chrome"))
    """

    def __init__(self, executable: str = "winget", timeout: float = DEFAULT_TIMEOUT) -> None:
        self.executable = executable
        self.timeout = timeout

    def is_available(self) -> bool:
        """Check if the winget executable is on PATH and answers --version."""
        if not command_exists(self.executable):
            return False
        return bool(self.version())

    def version(self) -> str:
        """Return the version string printed by `winget --version`, or ""."""
        return self.query(["--version"]).strip()

    def query(self, arguments: list[str], cancel_event: threading.Event | None = None) -> str:
        """Run winget with the given arguments and return stdout text.

        Args:
            arguments: Arguments following the executable name.
            cancel_event: Optional cooperative cancellation handle.

        Returns:
            Captured stdout, or "" on non-zero exit, timeout, cancellation
            or spawn failure.
        """
        output = run_process(
            [self.executable, *arguments],
            cancel_event=cancel_event,
            timeout=self.timeout,
        )
        text = output.text
        logger.debug("Raw winget output for %s: %r", " ".join(arguments), text[:2000])
        return text

    def list_package(
        self,
        package_id: str,
        *,
        exact: bool = True,
        cancel_event: threading.Event | None = None,
    ) -> str:
        """List an installed package by identifier.

        Args:
            package_id: Package identifier.
            exact: Use an exact id match; otherwise a partial match on any column.
            cancel_event: Optional cooperative cancellation handle.

        Returns:
            Raw `winget list` output, or "".
        """
        if exact:
            arguments = ["list", "--id", package_id, "--exact", SOURCE_AGREEMENTS_FLAG]
        else:
            arguments = ["list", package_id, SOURCE_AGREEMENTS_FLAG]
        return self.query(arguments, cancel_event)

    def check_upgrade(self, package_id: str, cancel_event: threading.Event | None = None) -> str:
        """Ask winget whether an upgrade is available for a package.

        Returns:
            Raw `winget upgrade --id` output, or "".
        """
        return self.query(["upgrade", "--id", package_id, SOURCE_AGREEMENTS_FLAG], cancel_event)

    def show(self, package_id: str, cancel_event: threading.Event | None = None) -> str:
        """Return the manifest details winget prints for a package, or ""."""
        return self.query(
            ["show", "--id", package_id, "--exact", SOURCE_AGREEMENTS_FLAG], cancel_event
        )
