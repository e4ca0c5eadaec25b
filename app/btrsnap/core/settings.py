"""Per-invocation parameter resolution.

Each command parameter comes from an explicit command-line option or,
failing that, from the configuration file. Explicit options always win.
"""

from datetime import timedelta
from pathlib import Path

from btrsnap.core.config import BtrsnapConfig, canonicalize_path


class MissingParameterError(Exception):
    """Raised when a required parameter is neither given nor configured."""


def resolve_snap_dir(
    explicit: Path | None,
    config: BtrsnapConfig | None,
    *,
    option: str = "--snap-dir",
) -> Path:
    """Resolve the snapshot root directory.

    Args:
        explicit: Value of the command-line option, if given.
        config: Loaded configuration, if any.
        option: Option name used in the error message.

    Returns:
        Canonical snapshot root directory.

    Raises:
        MissingParameterError: If neither source provides a directory.
        ValueError: If the explicit directory does not exist.
    """
    if explicit is not None:
        return canonicalize_path(explicit)
    if config is not None:
        return config.snap_dir
    msg = f"Snapshot directory must be specified via {option} or 'snap-dir' in the config file"
    raise MissingParameterError(msg)


def resolve_subvolumes(explicit: list[Path], config: BtrsnapConfig | None) -> list[Path]:
    """Resolve the source subvolumes to snapshot.

    Returns an empty list when neither source names any subvolume; the
    create operation reports that as its own error.

    Raises:
        ValueError: If an explicit subvolume does not exist.
    """
    if explicit:
        return [canonicalize_path(path) for path in explicit]
    if config is not None:
        return config.subvolumes
    return []


def resolve_keep(explicit: timedelta | None, config: BtrsnapConfig | None) -> timedelta:
    """Resolve the cleanup retention duration.

    Raises:
        MissingParameterError: If neither source provides a duration.
    """
    if explicit is not None:
        return explicit
    if config is not None and config.keep is not None:
        return config.keep
    msg = "Retention duration must be specified via --keep or 'cleanup.keep' in the config file"
    raise MissingParameterError(msg)
