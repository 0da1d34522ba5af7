"""Unit tests for path management.

Tests for the paths module that provides per-user directory paths.
"""

from pathlib import Path

import pytest

import wingetctl.core.paths as paths_module
from wingetctl.core.paths import (
    APP_NAME,
    get_config_dir,
    get_config_path,
    get_custom_catalog_path,
    get_default_catalog_path,
    get_state_dir,
)


class TestXdgDirectories:
    """Tests for XDG overrides."""

    def test_config_dir_from_xdg(self, tmp_path: Path) -> None:
        """XDG_CONFIG_HOME wins (set by the autouse fixture)."""
        assert get_config_dir() == tmp_path / "config" / APP_NAME

    def test_state_dir_from_xdg(self, tmp_path: Path) -> None:
        """XDG_STATE_HOME wins (set by the autouse fixture)."""
        assert get_state_dir() == tmp_path / "state" / APP_NAME

    def test_file_paths(self, tmp_path: Path) -> None:
        """Files live in the expected directories."""
        assert get_config_path() == tmp_path / "config" / APP_NAME / "config.toml"
        assert get_custom_catalog_path() == (
            tmp_path / "config" / APP_NAME / "catalog_custom.toml"
        )
        assert get_default_catalog_path() == (
            tmp_path / "state" / APP_NAME / "catalog_default.toml"
        )


class TestDefaults:
    """Tests for fallbacks when XDG variables are unset."""

    @pytest.fixture(autouse=True)
    def _clear_xdg(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.delenv("XDG_STATE_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.setenv("USERPROFILE", str(tmp_path / "home"))

    def test_home_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Outside Windows the dot-directories under home are used."""
        monkeypatch.delenv("LOCALAPPDATA", raising=False)
        home = Path.home()

        assert get_config_dir() == home / ".config" / APP_NAME
        assert get_state_dir() == home / ".local/state" / APP_NAME

    def test_windows_local_app_data(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """On Windows %LOCALAPPDATA% is the base directory."""
        local = tmp_path / "AppData" / "Local"
        monkeypatch.setenv("LOCALAPPDATA", str(local))
        monkeypatch.setattr(paths_module, "_WINDOWS", True)

        assert get_config_dir() == local / APP_NAME
        assert get_state_dir() == local / APP_NAME / "state"

    def test_local_app_data_ignored_elsewhere(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """LOCALAPPDATA only matters on Windows."""
        monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "AppData"))
        monkeypatch.setattr(paths_module, "_WINDOWS", False)

        assert get_config_dir() == Path.home() / ".config" / APP_NAME
