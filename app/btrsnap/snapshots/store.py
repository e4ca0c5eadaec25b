"""Abstract base class for volume stores.

This module defines the VolumeStore interface that wraps the
copy-on-write snapshot primitives the lifecycle operations depend on.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from btrsnap.snapshots.models import SubvolumeHandle, SubvolumeInfo


class VolumeStore(ABC):
    """Abstract base class for copy-on-write snapshot backends.

    Each operation is individually atomic from the caller's perspective;
    no transaction spans more than one call.

    Example:
        >>> store = BtrfsVolumeStore()
        >>> handle = store.get(Path("/mnt/top-level/@home"))
        >>> store.snapshot(handle, Path("/mnt/top-level/.snapshots/@home-1700000000"))
    """

    @abstractmethod
    def get(self, path: Path) -> SubvolumeHandle:
        """Resolve a filesystem path to a subvolume handle.

        Args:
            path: Path to resolve.

        Returns:
            Handle for the subvolume at path.

        Raises:
            NotASnapshotError: If path is not a subvolume.
            VolumeStoreUnavailableError: If the backend cannot be reached.
        """

    @abstractmethod
    def snapshot(self, source: SubvolumeHandle, destination: Path) -> None:
        """Create a snapshot of source at destination.

        Args:
            source: Handle of the subvolume to snapshot.
            destination: Path of the new snapshot; must not exist.

        Raises:
            SnapshotCreateError: If the snapshot cannot be created.
        """

    @abstractmethod
    def delete(self, handle: SubvolumeHandle) -> None:
        """Delete a subvolume.

        Args:
            handle: Handle of the subvolume to delete.

        Raises:
            SnapshotDeleteError: If the subvolume cannot be deleted.
        """

    @abstractmethod
    def info(self, handle: SubvolumeHandle) -> SubvolumeInfo:
        """Query subvolume metadata without side effects.

        Args:
            handle: Handle of the subvolume to query.

        Returns:
            SubvolumeInfo with generation and origin transaction id.

        Raises:
            VolumeStoreError: If the metadata cannot be read.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this backend is usable on the system.

        Returns:
            True if the backend can be used, False otherwise.
        """
