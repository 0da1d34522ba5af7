"""Utility modules for wingetctl.

This module exports commonly used utility functions.
"""

from wingetctl.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from wingetctl.utils.shell import ProcessOutput, command_exists, run_process

__all__ = [
    "ProcessOutput",
    "command_exists",
    "console",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_process",
]
