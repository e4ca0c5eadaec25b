"""In-memory view of the snapshots found in one directory scan.

The registry is rebuilt from the filesystem on every invocation; the
directory entry names are the only record of snapshot identity.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from btrsnap.snapshots.models import SnapshotIdentity
from btrsnap.snapshots.naming import decode_name
from btrsnap.snapshots.retention import is_expired

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RegisteredSnapshot:
    """A scanned entry whose name decodes to a snapshot identity.

    Attributes:
        path: Absolute path of the entry.
        identity: Identity decoded from the entry name.
    """

    path: Path
    identity: SnapshotIdentity

    @property
    def created_at(self) -> datetime:
        """Creation instant decoded from the entry name."""
        return self.identity.created_at


class SnapshotRegistry:
    """Snapshots of one root, classified by decoded identity.

    Iteration order is scan order. Distinct entries may decode to the same
    identity (e.g. ``app-100`` and ``app-0100``); both are kept. Entries
    whose names do not decode are kept apart in ``unrecognized`` and are
    never returned as snapshots.
    """

    def __init__(self) -> None:
        self._entries: dict[Path, RegisteredSnapshot] = {}
        self._unrecognized: list[Path] = []

    @classmethod
    def from_scan(cls, paths: Iterable[Path]) -> "SnapshotRegistry":
        """Build a registry by classifying scanned paths.

        Args:
            paths: Candidate entry paths, typically from SnapshotScanner.scan().

        Returns:
            Populated SnapshotRegistry.
        """
        registry = cls()
        for path in paths:
            registry.add(path)
        return registry

    def add(self, path: Path) -> RegisteredSnapshot | None:
        """Classify a path and register it if its name decodes.

        Args:
            path: Candidate entry path.

        Returns:
            The registered snapshot, or None if the name did not decode.
        """
        identity = decode_name(path.name)
        if identity is None:
            logger.debug("Not a snapshot name, skipping: %s", path)
            self._unrecognized.append(path)
            return None

        snapshot = RegisteredSnapshot(path=path, identity=identity)
        self._entries[path] = snapshot
        return snapshot

    @property
    def unrecognized(self) -> tuple[Path, ...]:
        """Scanned paths whose names are not snapshot names."""
        return tuple(self._unrecognized)

    def get(self, identity: SnapshotIdentity) -> RegisteredSnapshot | None:
        """Look up the first snapshot with the given identity."""
        for snapshot in self._entries.values():
            if snapshot.identity == identity:
                return snapshot
        return None

    def for_source(self, source_name: str) -> list[RegisteredSnapshot]:
        """Return the snapshots of one source subvolume, in scan order."""
        return [s for s in self._entries.values() if s.identity.source_name == source_name]

    def expired(self, cutoff: datetime) -> Iterator[RegisteredSnapshot]:
        """Yield snapshots created strictly before cutoff, in scan order.

        A snapshot created exactly at the cutoff is retained.
        """
        for snapshot in self._entries.values():
            if is_expired(snapshot.created_at, cutoff):
                yield snapshot

    def retained(self, cutoff: datetime) -> Iterator[RegisteredSnapshot]:
        """Yield snapshots created at or after cutoff, in scan order."""
        for snapshot in self._entries.values():
            if not is_expired(snapshot.created_at, cutoff):
                yield snapshot

    def __iter__(self) -> Iterator[RegisteredSnapshot]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identity: object) -> bool:
        return any(s.identity == identity for s in self._entries.values())
