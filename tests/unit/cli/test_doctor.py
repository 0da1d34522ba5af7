"""Unit tests for the doctor command."""

from pathlib import Path
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from wingetctl.cli.main import app
from wingetctl.scanners.winget import WingetScanner

runner = CliRunner()


def _scanner(version: str) -> MagicMock:
    scanner = MagicMock(spec=WingetScanner)
    scanner.version.return_value = version
    return scanner


class TestDoctorCommand:
    """Tests for wingetctl doctor."""

    def test_doctor_ready(self) -> None:
        """A working winget passes."""
        with (
            patch("wingetctl.cli.commands.doctor.command_exists", return_value=True),
            patch(
                "wingetctl.cli.commands.doctor.build_scanner",
                return_value=_scanner("v1.7.10861"),
            ),
        ):
            result = runner.invoke(app, ["doctor"])

        assert result.exit_code == 0
        assert "v1.7.10861" in result.stdout
        assert "catalog_default.toml" in result.stdout

    def test_doctor_missing_winget(self) -> None:
        """A missing winget fails without querying it."""
        scanner = _scanner("")
        with (
            patch("wingetctl.cli.commands.doctor.command_exists", return_value=False),
            patch("wingetctl.cli.commands.doctor.build_scanner", return_value=scanner),
        ):
            result = runner.invoke(app, ["doctor"])

        assert result.exit_code == 1
        scanner.version.assert_not_called()

    def test_doctor_uses_configured_executable(self, tmp_path: Path) -> None:
        """The executable from --config is checked."""
        config = tmp_path / "custom.toml"
        config.write_text('executable = "winget-dev"\n')

        with (
            patch("wingetctl.cli.commands.doctor.command_exists", return_value=False) as exists,
            patch("wingetctl.cli.commands.doctor.build_scanner", return_value=_scanner("")),
        ):
            result = runner.invoke(app, ["--config", str(config), "doctor"])

        exists.assert_called_once_with("winget-dev")
        assert "winget-dev" in result.stdout
