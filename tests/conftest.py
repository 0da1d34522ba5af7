"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config and state directories at a temporary location."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    return tmp_path


@pytest.fixture
def list_output() -> str:
    """Sample `winget list --id Google.Chrome --exact` output."""
    return """Name          Id            Version   Source
-----------------------------------------------------
Google Chrome Google.Chrome 119.0.1   winget"""


@pytest.fixture
def list_output_no_source() -> str:
    """Sample `winget list` output for a package installed outside winget."""
    return """Name   Id        Version
-------------------------------
7-Zip  7zip.7zip 23.01"""


@pytest.fixture
def upgrade_output() -> str:
    """Sample `winget upgrade --id Google.Chrome` output with an update."""
    return """Name          Id            Version  Available  Source
------------------------------------------------------------
Google Chrome Google.Chrome 119.0.1  120.0.2    winget
1 upgrades available."""


@pytest.fixture
def no_update_output() -> str:
    """Sample `winget upgrade --id` output when nothing is newer."""
    return "No applicable update found."


@pytest.fixture
def not_installed_output() -> str:
    """Sample `winget list` output for a package that is not installed."""
    return "No installed package found matching input criteria."


@pytest.fixture
def show_output() -> str:
    """Sample `winget show --id Git.Git --exact` output."""
    return """Found Git [Git.Git]
Version: 2.43.0
Publisher: The Git Development Community
Description: Git is a free and open source distributed version control system.
Homepage: https://gitforwindows.org
Tags:
  git
  vcs
Installer:
  Installer Type: inno"""
