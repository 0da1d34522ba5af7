"""Abstract base class for package operators.

This module defines the package-action interface consumed by the
operation queue, and the exceptions an action may raise.
"""

import threading
from abc import ABC, abstractmethod

from wingetctl.models.queue import QueueAction


class OperatorError(RuntimeError):
    """Raised when a package action fails.

    Attributes:
        returncode: Exit code of the external tool, if it ran.
        stderr: Error text captured from the tool.
    """

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class OperationCanceledError(Exception):
    """Raised when a package action stops because cancellation was requested."""


class Operator(ABC):
    """Abstract base class for all package operators.

    Operators execute one mutation for one package and either return
    normally (success) or raise. OperationCanceledError signals a
    cooperative cancellation; any other exception is a failure.

    Example:
        >>> operator = WingetOperator()
        >>> cancel = threading.Event()
        >>> operator.install("Google.Chrome", cancel)
    """

    @abstractmethod
    def install(self, package_id: str, cancel_event: threading.Event | None = None) -> None:
        """Install a package.

        Raises:
            OperatorError: If the installation fails.
            OperationCanceledError: If cancel_event was set.
        """

    @abstractmethod
    def uninstall(self, package_id: str, cancel_event: threading.Event | None = None) -> None:
        """Uninstall a package.

        Raises:
            OperatorError: If the removal fails.
            OperationCanceledError: If cancel_event was set.
        """

    @abstractmethod
    def upgrade(self, package_id: str, cancel_event: threading.Event | None = None) -> None:
        """Upgrade a package to the newest available version.

        Raises:
            OperatorError: If the upgrade fails.
            OperationCanceledError: If cancel_event was set.
        """

    def execute(
        self,
        action: QueueAction,
        package_id: str,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Dispatch a queued action to the matching method.

        Args:
            action: The requested mutation.
            package_id: Package identifier.
            cancel_event: Optional cooperative cancellation handle.

        Raises:
            ValueError: If the action type is not supported.
        """
        if action == QueueAction.INSTALL:
            self.install(package_id, cancel_event)
        elif action == QueueAction.UNINSTALL:
            self.uninstall(package_id, cancel_event)
        elif action == QueueAction.UPGRADE:
            self.upgrade(package_id, cancel_event)
        else:
            msg = f"Unsupported action: {action!r}"
            raise ValueError(msg)
