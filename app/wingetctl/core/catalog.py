"""Catalog storage.

The catalog is the list of packages wingetctl tracks. It is made of two
TOML files:

- catalog_default.toml: seeded with a starter set on first use; also
  holds the last resolved status of every tracked package.
- catalog_custom.toml: packages the user added.

Both use the same layout::

    [packages."Google.Chrome"]
    name = "Google Chrome"
    category = "Browsers"
    tags = ["browser", "popular"]
    is_installed = true
    installed_version = "119.0.1"

When merged, user entries override default entries with the same id.
"""

import logging
import os
import tomllib
from datetime import datetime
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wingetctl.core.paths import get_custom_catalog_path, get_default_catalog_path
from wingetctl.models.package import DEFAULT_SOURCE, Package

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base exception for catalog-related errors."""


class CatalogNotFoundError(CatalogError):
    """Raised when a catalog file is not found."""


class CatalogParseError(CatalogError):
    """Raised when a catalog file cannot be parsed."""


class CatalogValidationError(CatalogError):
    """Raised when catalog content is invalid."""


class CatalogEntry(BaseModel):
    """One package entry as stored on disk (the id is the table key)."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    source: str = DEFAULT_SOURCE
    description: str = ""
    category: str = ""
    tags: Annotated[list[str], Field(default_factory=list)]
    is_installed: bool = False
    installed_version: str = ""
    available_version: str = ""
    update_available: bool = False
    last_checked: datetime | None = None


class CatalogFile(BaseModel):
    """Top-level structure of a catalog file."""

    model_config = ConfigDict(extra="ignore")

    packages: Annotated[dict[str, CatalogEntry], Field(default_factory=dict)]


DEFAULT_PACKAGES: tuple[Package, ...] = (
    Package(
        id="Google.Chrome",
        name="Google Chrome",
        category="Browsers",
        tags=["browser", "popular", "google"],
        description="Fast and secure web browser",
    ),
    Package(
        id="7zip.7zip",
        name="7-Zip",
        category="Utilities",
        tags=["compression", "archive", "utility"],
        description="File archiver with high compression ratio",
    ),
    Package(
        id="Microsoft.VisualStudioCode",
        name="Visual Studio Code",
        category="Development",
        tags=["editor", "coding", "popular", "microsoft"],
        description="Code editor with support for debugging and extensions",
    ),
    Package(
        id="Discord.Discord",
        name="Discord",
        category="Communication",
        tags=["chat", "voice", "gaming", "popular"],
        description="Voice, video, and text communication platform",
    ),
    Package(
        id="Notepad++.Notepad++",
        name="Notepad++",
        category="Development",
        tags=["editor", "text", "coding"],
        description="Free source code editor and Notepad replacement",
    ),
)


def _entry_to_package(package_id: str, entry: CatalogEntry) -> Package:
    return Package(
        id=package_id,
        name=entry.name,
        source=entry.source,
        description=entry.description,
        category=entry.category,
        tags=list(entry.tags),
        is_installed=entry.is_installed,
        installed_version=entry.installed_version,
        available_version=entry.available_version,
        update_available=entry.update_available,
        last_checked=entry.last_checked,
    )


def _package_to_dict(package: Package) -> dict[str, Any]:
    """Convert a Package to a TOML-serializable dictionary.

    Empty optional fields are omitted to keep the file readable.
    """
    result: dict[str, Any] = {"source": package.source}
    if package.name:
        result["name"] = package.name
    if package.description:
        result["description"] = package.description
    if package.category:
        result["category"] = package.category
    if package.tags:
        result["tags"] = list(package.tags)
    result["is_installed"] = package.is_installed
    if package.installed_version:
        result["installed_version"] = package.installed_version
    if package.available_version:
        result["available_version"] = package.available_version
    result["update_available"] = package.update_available
    # TOML has no null; an unchecked package simply has no timestamp
    if package.last_checked is not None:
        result["last_checked"] = package.last_checked
    return result


def read_catalog(path: Path) -> list[Package]:
    """Load and validate packages from a catalog file.

    Args:
        path: Catalog file to read.

    Returns:
        Packages in file order.

    Raises:
        CatalogNotFoundError: If the file doesn't exist.
        CatalogParseError: If the TOML syntax is invalid.
        CatalogValidationError: If the content doesn't match the schema.
    """
    if not path.exists():
        raise CatalogNotFoundError(f"Catalog not found: {path}")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise CatalogParseError(f"Invalid TOML syntax in {path}: {e}") from e
    except OSError as e:
        raise CatalogError(f"Failed to read catalog {path}: {e}") from e

    try:
        catalog = CatalogFile.model_validate(data)
        return [_entry_to_package(pid, entry) for pid, entry in catalog.packages.items()]
    except (ValidationError, ValueError) as e:
        raise CatalogValidationError(f"Invalid catalog content in {path}: {e}") from e


def write_catalog(path: Path, packages: list[Package]) -> Path:
    """Write packages to a catalog file atomically.

    Args:
        path: Catalog file to write.
        packages: Packages to store; later duplicates of an id win.

    Returns:
        Path where the catalog was saved.

    Raises:
        CatalogError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {"packages": {pkg.id: _package_to_dict(pkg) for pkg in packages}}

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise CatalogError(f"Failed to write catalog {path}: {e}") from e

    return path


class CatalogStore:
    """Loads, merges and saves the default and user catalogs.

    Attributes:
        default_path: Path of the default catalog (also stores status).
        custom_path: Path of the user catalog.
    """

    def __init__(
        self,
        default_path: Path | None = None,
        custom_path: Path | None = None,
    ) -> None:
        self.default_path = default_path or get_default_catalog_path()
        self.custom_path = custom_path or get_custom_catalog_path()

    def load_default(self) -> list[Package]:
        """Load the default catalog, seeding it on first use."""
        if not self.default_path.exists():
            logger.info("Creating default catalog at %s", self.default_path)
            write_catalog(self.default_path, [_copy(pkg) for pkg in DEFAULT_PACKAGES])
        return read_catalog(self.default_path)

    def load_custom(self) -> list[Package]:
        """Load the user catalog; empty if the user never added anything."""
        if not self.custom_path.exists():
            return []
        return read_catalog(self.custom_path)

    def load_merged(self) -> list[Package]:
        """Load both catalogs merged by id, user entries winning.

        Status fields of a user entry that was never checked are taken from
        the default catalog, where save() records them.
        """
        default_catalog = self.load_default()
        logger.info("Default catalog count: %d", len(default_catalog))
        custom_catalog = self.load_custom()
        logger.info("Custom catalog count: %d", len(custom_catalog))

        merged: dict[str, Package] = {pkg.id: pkg for pkg in default_catalog}
        for pkg in custom_catalog:
            stored = merged.get(pkg.id)
            if stored is not None and pkg.last_checked is None:
                _copy_status(stored, pkg)
            merged[pkg.id] = pkg

        logger.info("Merged catalog count: %d", len(merged))
        return list(merged.values())

    def save(self, packages: list[Package]) -> Path:
        """Persist packages and their status to the default catalog.

        Raises:
            CatalogError: If the file cannot be written.
        """
        path = write_catalog(self.default_path, packages)
        logger.info("Catalog saved with %d packages", len(packages))
        return path

    def add_custom(self, package: Package) -> bool:
        """Add a package to the user catalog.

        Returns:
            False if a package with the same id is already there.
        """
        catalog = self.load_custom()
        if any(existing.id == package.id for existing in catalog):
            logger.warning("Package %s already exists in catalog", package.id)
            return False
        catalog.append(package)
        write_catalog(self.custom_path, catalog)
        logger.info("Package %s added to catalog", package.id)
        return True

    def remove_custom(self, package_id: str) -> bool:
        """Remove a package added by the user or tracked after an action.

        The entry goes from the user catalog and, unless it is one of the
        starter packages, from the status records save() keeps in the
        default catalog. Starter packages themselves cannot be removed.

        Returns:
            True if the package was found and removed.
        """
        wanted = package_id.lower()
        removed = False

        catalog = self.load_custom()
        remaining = [pkg for pkg in catalog if pkg.id.lower() != wanted]
        if len(remaining) != len(catalog):
            write_catalog(self.custom_path, remaining)
            removed = True

        if find_package(list(DEFAULT_PACKAGES), package_id) is None:
            stored = self.load_default()
            kept = [pkg for pkg in stored if pkg.id.lower() != wanted]
            if len(kept) != len(stored):
                write_catalog(self.default_path, kept)
                removed = True

        if removed:
            logger.info("Package %s removed from catalog", package_id)
        return removed


def find_package(packages: list[Package], package_id: str) -> Package | None:
    """Find a package by id, ignoring case as winget does."""
    wanted = package_id.lower()
    for package in packages:
        if package.id.lower() == wanted:
            return package
    return None


def _copy(package: Package) -> Package:
    return Package(
        id=package.id,
        name=package.name,
        source=package.source,
        description=package.description,
        category=package.category,
        tags=list(package.tags),
    )


def _copy_status(source: Package, target: Package) -> None:
    target.source = source.source
    target.is_installed = source.is_installed
    target.installed_version = source.installed_version
    target.available_version = source.available_version
    target.update_available = source.update_available
    target.last_checked = source.last_checked
