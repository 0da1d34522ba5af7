"""Unit tests for the catalog commands."""

from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from wingetctl.cli.main import app
from wingetctl.core.catalog import CatalogStore, find_package
from wingetctl.core.resolver import PackageInfoResolver
from wingetctl.models.package import Package

runner = CliRunner()


class TestCatalogList:
    """Tests for wingetctl catalog list."""

    def test_list_default_catalog(self) -> None:
        """The seeded starter packages are listed."""
        result = runner.invoke(app, ["catalog", "list"])

        assert result.exit_code == 0
        assert "Google.Chrome" in result.stdout
        assert "Notepad++.Notepad++" in result.stdout

    def test_list_by_category(self) -> None:
        """--category filters case-insensitively."""
        result = runner.invoke(app, ["catalog", "list", "--category", "browsers"])

        assert result.exit_code == 0
        assert "Google.Chrome" in result.stdout
        assert "7zip.7zip" not in result.stdout

    def test_list_search(self) -> None:
        """--search matches names and ids."""
        result = runner.invoke(app, ["catalog", "list", "--search", "zip"])

        assert "7zip.7zip" in result.stdout
        assert "Discord.Discord" not in result.stdout

    def test_list_no_match(self) -> None:
        """An empty result is reported."""
        result = runner.invoke(app, ["catalog", "list", "--search", "nothing-like-this"])

        assert result.exit_code == 0
        assert "No packages match" in result.stdout

    def test_broken_catalog(self) -> None:
        """An unreadable catalog is an error."""
        store = CatalogStore()
        store.custom_path.parent.mkdir(parents=True)
        store.custom_path.write_text("[packages\n")

        result = runner.invoke(app, ["catalog", "list"])

        assert result.exit_code == 1


class TestCatalogAdd:
    """Tests for wingetctl catalog add."""

    def test_add_without_lookup(self) -> None:
        """A package can be added with explicit metadata."""
        result = runner.invoke(
            app,
            [
                "catalog",
                "add",
                "Git.Git",
                "--no-lookup",
                "--name",
                "Git",
                "-c",
                "Dev",
                "-t",
                "vcs",
            ],
        )

        assert result.exit_code == 0
        git = find_package(CatalogStore().load_custom(), "Git.Git")
        assert git is not None
        assert git.name == "Git"
        assert git.category == "Dev"
        assert git.tags == ["vcs"]

    def test_add_with_lookup(self) -> None:
        """Name and description come from winget show."""
        resolver = MagicMock(spec=PackageInfoResolver)
        resolver.details.return_value = Package(
            id="Git.Git", name="Git", description="Version control"
        )

        with patch("wingetctl.cli.commands.catalog.build_resolver", return_value=resolver):
            result = runner.invoke(app, ["catalog", "add", "Git.Git"])

        assert result.exit_code == 0
        git = find_package(CatalogStore().load_custom(), "Git.Git")
        assert git is not None
        assert git.name == "Git"
        assert git.description == "Version control"

    def test_add_lookup_miss(self) -> None:
        """An unknown package is still added, with a warning."""
        resolver = MagicMock(spec=PackageInfoResolver)
        resolver.details.return_value = None

        with patch("wingetctl.cli.commands.catalog.build_resolver", return_value=resolver):
            result = runner.invoke(app, ["catalog", "add", "Vendor.Tool"])

        assert result.exit_code == 0
        assert find_package(CatalogStore().load_custom(), "Vendor.Tool") is not None

    def test_add_duplicate(self) -> None:
        """Adding twice keeps one entry."""
        runner.invoke(app, ["catalog", "add", "Git.Git", "--no-lookup"])
        result = runner.invoke(app, ["catalog", "add", "Git.Git", "--no-lookup"])

        assert result.exit_code == 0
        assert len(CatalogStore().load_custom()) == 1


class TestCatalogRemove:
    """Tests for wingetctl catalog remove."""

    def test_remove(self) -> None:
        """A user package can be removed."""
        runner.invoke(app, ["catalog", "add", "Git.Git", "--no-lookup"])
        result = runner.invoke(app, ["catalog", "remove", "Git.Git"])

        assert result.exit_code == 0
        assert CatalogStore().load_custom() == []

    def test_remove_after_status_saved(self) -> None:
        """A package whose status was saved is really gone after remove."""
        runner.invoke(app, ["catalog", "add", "Git.Git", "--no-lookup"])
        store = CatalogStore()
        store.save(store.load_merged())

        result = runner.invoke(app, ["catalog", "remove", "Git.Git"])

        assert result.exit_code == 0
        assert find_package(CatalogStore().load_merged(), "Git.Git") is None
        listed = runner.invoke(app, ["catalog", "list"])
        assert "Git.Git" not in listed.stdout

    def test_remove_unknown(self) -> None:
        """Removing an unknown package is an error."""
        result = runner.invoke(app, ["catalog", "remove", "Nope.Nope"])
        assert result.exit_code == 1
