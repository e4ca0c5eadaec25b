"""Snapshot lifecycle and retention engine.

This package provides the snapshot name codec, the volume store
interface and its btrfs backend, directory scanning, the in-memory
snapshot registry, the retention policy, and the lifecycle operations
that combine them.
"""

from btrsnap.snapshots.btrfs import BtrfsVolumeStore
from btrsnap.snapshots.errors import (
    BtrsnapError,
    NoSourcesError,
    NoTargetsError,
    NotASnapshotError,
    RootNotFoundError,
    ScanError,
    SnapshotCreateError,
    SnapshotDeleteError,
    VolumeStoreError,
    VolumeStoreUnavailableError,
)
from btrsnap.snapshots.lifecycle import MARKER_NAME, SnapshotManager
from btrsnap.snapshots.models import (
    SnapshotAction,
    SnapshotActionResult,
    SnapshotIdentity,
    SnapshotRecord,
    SubvolumeHandle,
    SubvolumeInfo,
)
from btrsnap.snapshots.naming import decode_name, encode_name
from btrsnap.snapshots.registry import RegisteredSnapshot, SnapshotRegistry
from btrsnap.snapshots.retention import compute_cutoff, is_expired, parse_duration
from btrsnap.snapshots.scanner import SnapshotScanner
from btrsnap.snapshots.store import VolumeStore

__all__ = [
    "MARKER_NAME",
    "BtrfsVolumeStore",
    "BtrsnapError",
    "NoSourcesError",
    "NoTargetsError",
    "NotASnapshotError",
    "RegisteredSnapshot",
    "RootNotFoundError",
    "ScanError",
    "SnapshotAction",
    "SnapshotActionResult",
    "SnapshotCreateError",
    "SnapshotDeleteError",
    "SnapshotIdentity",
    "SnapshotManager",
    "SnapshotRecord",
    "SnapshotRegistry",
    "SnapshotScanner",
    "SubvolumeHandle",
    "SubvolumeInfo",
    "VolumeStore",
    "VolumeStoreError",
    "VolumeStoreUnavailableError",
    "compute_cutoff",
    "decode_name",
    "encode_name",
    "is_expired",
    "parse_duration",
]
