"""Snapshot entry name encoding.

A snapshot's identity is stored only in its directory entry name,
``<source_name>-<epoch_seconds>``. Decoding splits at the rightmost
separator, so source names may contain ``-`` but the timestamp suffix
may not. A source name that itself ends in ``-<digits>`` is ambiguous:
its trailing digits are read back as the timestamp.
"""

from datetime import UTC, datetime

from btrsnap.snapshots.models import SnapshotIdentity

SEPARATOR = "-"


def encode_name(source_name: str, created_at: datetime) -> str:
    """Build the directory entry name for a snapshot.

    Args:
        source_name: Final path segment of the source subvolume.
        created_at: Timezone-aware creation instant.

    Returns:
        Entry name of the form ``<source_name>-<epoch_seconds>``.

    Raises:
        ValueError: If source_name is empty or created_at is naive.
    """
    identity = SnapshotIdentity(source_name=source_name, created_at=created_at)
    return f"{identity.source_name}{SEPARATOR}{identity.epoch_seconds}"


def decode_name(entry_name: str) -> SnapshotIdentity | None:
    """Recover the snapshot identity from a directory entry name.

    Returns None instead of raising for anything that is not a snapshot
    name, so a stray entry never aborts a directory scan.

    Args:
        entry_name: Directory entry name (final path segment).

    Returns:
        SnapshotIdentity, or None if the name does not decode.
    """
    source_name, separator, suffix = entry_name.rpartition(SEPARATOR)
    if not separator or not source_name:
        return None
    if not (suffix.isascii() and suffix.isdigit()):
        return None

    try:
        created_at = datetime.fromtimestamp(int(suffix), tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None

    return SnapshotIdentity(source_name=source_name, created_at=created_at)
