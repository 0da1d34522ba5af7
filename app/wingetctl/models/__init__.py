"""Data models for wingetctl.

This module exports the core data structures used throughout the application.
"""

from wingetctl.models.package import DEFAULT_SOURCE, Package, PackageSource
from wingetctl.models.queue import (
    QueueAction,
    QueueItem,
    QueueItemStatus,
    QueueItemView,
)

__all__ = [
    "DEFAULT_SOURCE",
    "Package",
    "PackageSource",
    "QueueAction",
    "QueueItem",
    "QueueItemStatus",
    "QueueItemView",
]
