"""Snapshot domain models.

This module defines the data structures shared by the snapshot
lifecycle: the identity decoded from an entry name, volume store
handles and metadata, and the results reported by each operation.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path


@dataclass(frozen=True, slots=True)
class SnapshotIdentity:
    """Source subvolume and creation instant encoded in a snapshot name.

    Attributes:
        source_name: Final path segment of the snapshotted subvolume.
        created_at: Timezone-aware UTC creation instant (whole seconds).
    """

    source_name: str
    created_at: datetime

    def __post_init__(self) -> None:
        """Validate identity data after initialization."""
        if not self.source_name:
            msg = "Source name cannot be empty"
            raise ValueError(msg)
        if self.created_at.tzinfo is None:
            msg = "created_at must be timezone-aware"
            raise ValueError(msg)

    @property
    def epoch_seconds(self) -> int:
        """Creation instant as Unix seconds."""
        return int(self.created_at.timestamp())


@dataclass(frozen=True, slots=True)
class SubvolumeHandle:
    """Opaque reference to a subvolume resolved by a volume store.

    Handles are short-lived: operations re-resolve entries from their
    path instead of holding handles across invocations.

    Attributes:
        path: Absolute path of the subvolume.
    """

    path: Path


@dataclass(frozen=True, slots=True)
class SubvolumeInfo:
    """Read-only subvolume metadata.

    Attributes:
        generation: Current generation counter of the subvolume.
        origin_transaction_id: Transaction id in which the subvolume was created.
    """

    generation: int
    origin_transaction_id: int


@dataclass(frozen=True, slots=True)
class SnapshotRecord:
    """One entry reported by the list operation.

    Attributes:
        path: Absolute path of the snapshot.
        generation: Generation counter reported by the volume store.
        origin_transaction_id: Origin transaction id reported by the volume store.
        identity: Decoded name, or None if the entry name does not decode.
    """

    path: Path
    generation: int
    origin_transaction_id: int
    identity: SnapshotIdentity | None = None


class SnapshotAction(str, Enum):
    """Kind of mutation reported in a SnapshotActionResult.

    Attributes:
        CREATED: Snapshot created by the create operation.
        DELETED: Snapshot removed by explicit deletion.
        CLEANED: Snapshot removed by the retention sweep.
    """

    CREATED = "created"
    DELETED = "deleted"
    CLEANED = "cleaned"


@dataclass(frozen=True, slots=True)
class SnapshotActionResult:
    """Result of a single create, delete or cleanup step.

    Attributes:
        path: Snapshot path that was operated on.
        action: Kind of mutation.
        success: Whether the step completed successfully.
        error: Error message if the step failed, None otherwise.
        dry_run: Whether this was a dry-run (no actual change).
        source: Source subvolume path (create only).
    """

    path: Path
    action: SnapshotAction
    success: bool
    error: str | None = None
    dry_run: bool = False
    source: Path | None = None
