"""Unit tests for the status command."""

import json
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from wingetctl.cli.main import app
from wingetctl.core.catalog import CatalogStore, find_package
from wingetctl.core.resolver import PackageInfoResolver

runner = CliRunner()


class TestStatusCommand:
    """Tests for wingetctl status."""

    def test_status_help(self) -> None:
        """Status command shows help."""
        result = runner.invoke(app, ["status", "--help"])
        assert result.exit_code == 0
        assert "installed and up to date" in result.stdout

    def test_status_table(self, fake_resolver: PackageInfoResolver) -> None:
        """The whole catalog is checked and shown as a table."""
        with patch("wingetctl.cli.commands.status.build_resolver", return_value=fake_resolver):
            result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "Google.Chrome" in result.stdout
        assert "120.0.2" in result.stdout
        assert "7zip.7zip" in result.stdout

    def test_status_saves_catalog(self, fake_resolver: PackageInfoResolver) -> None:
        """Resolved status is written back to the catalog."""
        with patch("wingetctl.cli.commands.status.build_resolver", return_value=fake_resolver):
            runner.invoke(app, ["status"])

        chrome = find_package(CatalogStore().load_merged(), "Google.Chrome")
        assert chrome is not None
        assert chrome.is_installed is True
        assert chrome.update_available is True
        assert chrome.last_checked is not None

    def test_status_no_save(self, fake_resolver: PackageInfoResolver) -> None:
        """--no-save leaves the catalog untouched."""
        with patch("wingetctl.cli.commands.status.build_resolver", return_value=fake_resolver):
            runner.invoke(app, ["status", "--no-save"])

        chrome = find_package(CatalogStore().load_merged(), "Google.Chrome")
        assert chrome is not None
        assert chrome.last_checked is None

    def test_status_json_updates_only(self, fake_resolver: PackageInfoResolver) -> None:
        """JSON output with --updates-only lists only outdated packages."""
        with patch("wingetctl.cli.commands.status.build_resolver", return_value=fake_resolver):
            result = runner.invoke(app, ["status", "--format", "json", "--updates-only"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [pkg["id"] for pkg in data] == ["Google.Chrome"]
        assert data[0]["installed_version"] == "119.0.1"
        assert data[0]["available_version"] == "120.0.2"
        assert isinstance(data[0]["last_checked"], str)
        assert data[0]["status"] == "update available"

    def test_status_selected_ids(self, fake_resolver: PackageInfoResolver) -> None:
        """Only the given ids are checked, including untracked ones."""
        with patch("wingetctl.cli.commands.status.build_resolver", return_value=fake_resolver):
            result = runner.invoke(app, ["status", "--format", "json", "Git.Git"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [pkg["id"] for pkg in data] == ["Git.Git"]
        assert data[0]["is_installed"] is False
        assert data[0]["status"] == "not installed"

    def test_status_winget_missing(self) -> None:
        """A missing winget is an error."""
        resolver = MagicMock(spec=PackageInfoResolver)
        resolver.scanner = MagicMock()
        resolver.scanner.is_available.return_value = False

        with patch("wingetctl.cli.commands.status.build_resolver", return_value=resolver):
            result = runner.invoke(app, ["status"])

        assert result.exit_code == 1
        resolver.refresh_all.assert_not_called()
