"""Utility modules for btrsnap.

This module exports commonly used utility functions.
"""

from btrsnap.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from btrsnap.utils.shell import CommandResult, command_exists, format_command, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "format_command",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
