"""Fixtures shared by CLI command tests."""

from unittest.mock import MagicMock

import pytest

from wingetctl.core.resolver import PackageInfoResolver
from wingetctl.scanners.winget import WingetScanner

LISTED = "Name Id Version Source\nGoogle Chrome Google.Chrome 119.0.1 winget"
UPGRADABLE = (
    "Name Id Version Available Source\nGoogle Chrome Google.Chrome 119.0.1 120.0.2 winget"
)


@pytest.fixture(autouse=True)
def wide_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep Rich tables from truncating ids."""
    monkeypatch.setenv("COLUMNS", "200")


@pytest.fixture
def fake_scanner() -> MagicMock:
    """Scanner where only Google.Chrome is installed, with an update pending."""
    scanner = MagicMock(spec=WingetScanner)
    scanner.is_available.return_value = True

    def list_package(package_id: str, exact: bool = True, cancel_event: object = None) -> str:
        return LISTED if package_id == "Google.Chrome" else ""

    def check_upgrade(package_id: str, cancel_event: object = None) -> str:
        return UPGRADABLE if package_id == "Google.Chrome" else "No applicable update found."

    scanner.list_package.side_effect = list_package
    scanner.check_upgrade.side_effect = check_upgrade
    return scanner


@pytest.fixture
def fake_resolver(fake_scanner: MagicMock) -> PackageInfoResolver:
    """Real resolver on top of the fake scanner."""
    return PackageInfoResolver(fake_scanner)
