"""winget package operator implementation.

Executes package installation, removal and upgrade using winget.
"""

import logging
import threading

from wingetctl.operators.base import OperationCanceledError, Operator, OperatorError
from wingetctl.scanners.winget import SOURCE_AGREEMENTS_FLAG
from wingetctl.utils.shell import ProcessOutput, command_exists, run_process

logger = logging.getLogger(__name__)

PACKAGE_AGREEMENTS_FLAG = "--accept-package-agreements"


class WingetOperator(Operator):
    """Operator for winget packages.

    Every action runs silently (`--silent`) against an exact id match.
    Non-zero exit codes and timeouts raise OperatorError; cancellation
    raises OperationCanceledError.

    Attributes:
        executable: Name or path of the winget binary.
        timeout: Per-action timeout in seconds. Installers can be slow.
        accept_agreements: Pass the agreement flags so winget never prompts.
    """

    # Timeout for package actions (30 minutes)
    _ACTION_TIMEOUT: float = 1800.0

    def __init__(
        self,
        executable: str = "winget",
        timeout: float = _ACTION_TIMEOUT,
        accept_agreements: bool = True,
    ) -> None:
        self.executable = executable
        self.timeout = timeout
        self.accept_agreements = accept_agreements

    def is_available(self) -> bool:
        """Check if the winget executable is on PATH."""
        return command_exists(self.executable)

    def install(self, package_id: str, cancel_event: threading.Event | None = None) -> None:
        """Install a package using `winget install`."""
        logger.info("Installing package %s", package_id)
        self._run("install", package_id, cancel_event, package_agreements=True)

    def uninstall(self, package_id: str, cancel_event: threading.Event | None = None) -> None:
        """Uninstall a package using `winget uninstall`."""
        logger.info("Uninstalling package %s", package_id)
        self._run("uninstall", package_id, cancel_event, package_agreements=False)

    def upgrade(self, package_id: str, cancel_event: threading.Event | None = None) -> None:
        """Upgrade a package using `winget upgrade`."""
        logger.info("Upgrading package %s", package_id)
        self._run("upgrade", package_id, cancel_event, package_agreements=True)

    def build_args(self, verb: str, package_id: str, *, package_agreements: bool) -> list[str]:
        """Build the winget command line for an action.

        Args:
            verb: winget verb (install, uninstall, upgrade).
            package_id: Package identifier.
            package_agreements: Whether the verb accepts package agreement flags.

        Returns:
            Full argument list, starting with the executable.
        """
        args = [self.executable, verb, "--id", package_id, "--exact", "--silent"]
        if self.accept_agreements and package_agreements:
            args.extend([PACKAGE_AGREEMENTS_FLAG, SOURCE_AGREEMENTS_FLAG])
        return args

    def _run(
        self,
        verb: str,
        package_id: str,
        cancel_event: threading.Event | None,
        *,
        package_agreements: bool,
    ) -> ProcessOutput:
        """Run an action and translate its outcome into return or raise.

        Raises:
            OperationCanceledError: If cancel_event was set before or during the run.
            OperatorError: If winget failed, timed out or could not start.
        """
        args = self.build_args(verb, package_id, package_agreements=package_agreements)
        output = run_process(args, cancel_event=cancel_event, timeout=self.timeout)

        if output.canceled:
            msg = f"{verb} of {package_id} was canceled"
            raise OperationCanceledError(msg)

        if not output.success:
            msg = f"winget {verb} failed for {package_id}: {output.error_message}"
            raise OperatorError(msg, returncode=output.returncode, stderr=output.stderr)

        return output
