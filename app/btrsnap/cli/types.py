"""Shared types and utilities for CLI commands.

This module provides the helpers every command module uses to reach the
loaded configuration, the global output flags, and the snapshot manager.
"""

from enum import Enum
from pathlib import Path

import typer

from btrsnap.core.config import BtrsnapConfig, ConfigError, load_config, resolve_config_path
from btrsnap.core.settings import MissingParameterError
from btrsnap.snapshots import (
    BtrfsVolumeStore,
    BtrsnapError,
    SnapshotManager,
    VolumeStoreUnavailableError,
)
from btrsnap.utils.formatting import print_error

# Errors a lifecycle command reports as "Error: ..." with exit code 1
COMMAND_ERRORS = (BtrsnapError, MissingParameterError, PermissionError, ValueError)


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def build_manager() -> SnapshotManager:
    """Create a snapshot manager backed by the btrfs command-line tool.

    Raises:
        VolumeStoreUnavailableError: If the btrfs executable is not on PATH.
    """
    store = BtrfsVolumeStore()
    if not store.is_available():
        msg = f"{store.command} command not found; install btrfs-progs"
        raise VolumeStoreUnavailableError(Path(store.command), msg)
    return SnapshotManager(store)


def is_quiet(ctx: typer.Context) -> bool:
    """Check whether the global --quiet flag was given."""
    obj = ctx.ensure_object(dict)
    return bool(obj.get("quiet", False))


def get_config(ctx: typer.Context) -> BtrsnapConfig | None:
    """Load the configuration file selected by --config or $BTRSNAP_CONFIG.

    The file is loaded at most once per invocation and only by commands
    that need it.

    Returns:
        Loaded configuration, or None when no configuration file is in use.

    Raises:
        typer.Exit: If the configuration file cannot be loaded.
    """
    obj = ctx.ensure_object(dict)
    if "config" in obj:
        return obj["config"]

    path = resolve_config_path(obj.get("config_path"))
    config: BtrsnapConfig | None = None
    if path is not None:
        try:
            config = load_config(path)
        except ConfigError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

    obj["config"] = config
    return config
