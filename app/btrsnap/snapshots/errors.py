"""Exception hierarchy for snapshot lifecycle operations.

Every exception carries the path that caused it so an operator can act
on the message without re-running in verbose mode.
"""

from pathlib import Path


class BtrsnapError(Exception):
    """Base exception for all snapshot lifecycle errors."""


class RootNotFoundError(BtrsnapError):
    """Raised when the snapshot root directory does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Snapshot directory {path} does not exist")


class NoTargetsError(BtrsnapError):
    """Raised when an explicit deletion is requested with no targets."""

    def __init__(self) -> None:
        super().__init__("No snapshots specified. Use --snap <path> to select snapshots to delete.")


class NoSourcesError(BtrsnapError):
    """Raised when snapshot creation is requested with no source subvolumes."""

    def __init__(self) -> None:
        super().__init__(
            "No subvolumes specified. Provide --subvol or 'subvol-names' in the config file."
        )


class ScanError(BtrsnapError):
    """Raised when the snapshot root itself cannot be enumerated."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot scan snapshot directory {path}: {reason}")


class VolumeStoreError(BtrsnapError):
    """Base exception for failures reported by a volume store backend.

    Attributes:
        path: Filesystem path the failed operation was acting on.
    """

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(message)


class NotASnapshotError(VolumeStoreError):
    """Raised when a path is not a subvolume managed by the volume store."""


class SnapshotCreateError(VolumeStoreError):
    """Raised when a snapshot cannot be created."""


class SnapshotDeleteError(VolumeStoreError):
    """Raised when a snapshot cannot be deleted."""


class VolumeStoreUnavailableError(VolumeStoreError):
    """Raised when the volume store backend tooling is missing."""
