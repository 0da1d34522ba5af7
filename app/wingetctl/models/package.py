"""Package model for catalog entries and resolved status.

This module defines the data structure that carries a package's identity
together with the status snapshot reconstructed from winget output.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class PackageSource(Enum):
    """Registries (winget "sources") that can resolve a package."""

    WINGET = "winget"
    MSSTORE = "msstore"


# Channel assumed when the tool output does not name one
DEFAULT_SOURCE = PackageSource.WINGET.value


@dataclass(slots=True)
class Package:
    """A package known to the catalog, plus its last resolved status.

    Identity and catalog metadata are set when the package is created.
    Status fields are only written by the resolver's refresh operation.

    Attributes:
        id: Registry identifier (e.g., 'Google.Chrome'). Immutable by convention.
        name: Human-readable display name.
        source: Registry that resolved the package ('winget' or 'msstore').
        description: Short description shown in listings.
        category: Catalog category used for grouping.
        tags: Free-form catalog tags.
        is_installed: Whether the package is currently installed.
        installed_version: Installed version, empty when unknown or absent.
        available_version: Newest available version, empty when unknown.
        update_available: True only when a newer version was actually parsed.
        last_checked: UTC timestamp of the last successful refresh.
    """

    id: str
    name: str = ""
    source: str = DEFAULT_SOURCE
    description: str = ""
    category: str = ""
    tags: list[str] = field(default_factory=list)
    is_installed: bool = False
    installed_version: str = ""
    available_version: str = ""
    update_available: bool = False
    last_checked: datetime | None = None

    def __post_init__(self) -> None:
        """Validate package data after initialization."""
        if not self.id or not self.id.strip():
            msg = "Package id cannot be empty"
            raise ValueError(msg)

    @property
    def display_name(self) -> str:
        """Return the display name, falling back to the id."""
        return self.name or self.id

    @property
    def status_label(self) -> str:
        """Return a short status label for listings."""
        if self.last_checked is None:
            return "unknown"
        if not self.is_installed:
            return "not installed"
        if self.update_available:
            return "update available"
        return "installed"
