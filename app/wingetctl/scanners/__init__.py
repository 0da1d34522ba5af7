"""Query-side access to winget.

This module exports the scanner that runs winget queries and the
parsers that turn their text output into structured values.
"""

from wingetctl.scanners.parsing import (
    parse_available_version,
    parse_installed_version,
    parse_show_details,
    parse_source,
)
from wingetctl.scanners.winget import WingetScanner

__all__ = [
    "WingetScanner",
    "parse_available_version",
    "parse_installed_version",
    "parse_show_details",
    "parse_source",
]
