"""Queue models for package operations.

This module defines the data structures for requested package mutations
(install, uninstall, upgrade) and their lifecycle inside the operation queue.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum


class QueueAction(str, Enum):
    """Type of package mutation requested through the queue.

    Attributes:
        INSTALL: Install a package that is not currently installed.
        UNINSTALL: Remove an installed package.
        UPGRADE: Upgrade an installed package to the newest version.
    """

    INSTALL = "install"
    UNINSTALL = "uninstall"
    UPGRADE = "upgrade"


class QueueItemStatus(str, Enum):
    """Lifecycle status of a queue item.

    PENDING -> RUNNING -> {COMPLETED | FAILED | CANCELED}. CANCELED is also
    reachable directly from PENDING. The last three states are terminal.
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transition may leave this status."""
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset(
    {QueueItemStatus.COMPLETED, QueueItemStatus.FAILED, QueueItemStatus.CANCELED}
)


def _new_item_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(slots=True)
class QueueItem:
    """One requested package mutation.

    Instances are owned and mutated by OperationQueue only. Everything
    outside the queue sees QueueItemView snapshots.

    Attributes:
        package_id: Identifier of the package to operate on.
        action: Requested mutation.
        status: Current lifecycle status.
        progress: Advisory progress from 0 to 100.
        log: Append-only diagnostic lines, mostly filled on failure.
        cancel_event: Cancellation handle, present only while running.
        item_id: Short unique handle for this request.
    """

    package_id: str
    action: QueueAction
    status: QueueItemStatus = QueueItemStatus.PENDING
    progress: float = 0.0
    log: list[str] = field(default_factory=list)
    cancel_event: threading.Event | None = field(default=None, repr=False, compare=False)
    item_id: str = field(default_factory=_new_item_id)

    def __post_init__(self) -> None:
        """Validate item data after initialization."""
        if not self.package_id:
            msg = "Package id cannot be empty"
            raise ValueError(msg)

    def snapshot(self) -> QueueItemView:
        """Return an immutable copy of the current state."""
        return QueueItemView(
            item_id=self.item_id,
            package_id=self.package_id,
            action=self.action,
            status=self.status,
            progress=self.progress,
            log=tuple(self.log),
        )


@dataclass(frozen=True, slots=True)
class QueueItemView:
    """Read-only snapshot of a QueueItem, as handed to observers."""

    item_id: str
    package_id: str
    action: QueueAction
    status: QueueItemStatus
    progress: float
    log: tuple[str, ...] = ()

    @property
    def is_terminal(self) -> bool:
        """Check if the item has reached a terminal status."""
        return self.status.is_terminal

    @property
    def last_message(self) -> str | None:
        """Return the last log line, if any."""
        return self.log[-1] if self.log else None
