"""CLI commands for btrsnap.

This package contains all subcommand implementations.
"""

from btrsnap.cli.commands import cleanup, config, create, delete, listing

__all__ = ["cleanup", "config", "create", "delete", "listing"]
