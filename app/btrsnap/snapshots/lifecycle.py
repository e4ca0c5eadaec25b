"""Snapshot lifecycle operations: create, delete, list and cleanup.

Each operation validates its inputs eagerly, raising before any volume
store call, and returns a lazy iterator of results so callers can
report progress as it happens.

Error policy differs by operation. Create and delete are operator
initiated and abort on the first volume store failure. Cleanup runs
unattended, so a failure on one entry is reported and the sweep moves
on to the next entry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

from btrsnap.snapshots.errors import (
    NoSourcesError,
    NoTargetsError,
    NotASnapshotError,
    RootNotFoundError,
    SnapshotCreateError,
    VolumeStoreError,
    VolumeStoreUnavailableError,
)
from btrsnap.snapshots.models import SnapshotAction, SnapshotActionResult, SnapshotRecord
from btrsnap.snapshots.naming import decode_name, encode_name
from btrsnap.snapshots.registry import SnapshotRegistry
from btrsnap.snapshots.retention import compute_cutoff, format_duration
from btrsnap.snapshots.scanner import SnapshotScanner
from btrsnap.snapshots.store import VolumeStore

logger = logging.getLogger(__name__)

# Empty marker file created inside every new snapshot
MARKER_NAME = ".ignore"


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SnapshotManager:
    """Runs snapshot lifecycle operations against a volume store.

    Args:
        store: Volume store used to resolve, create and delete subvolumes.
        clock: Returns the current timezone-aware time. Defaults to UTC now.
    """

    def __init__(
        self,
        store: VolumeStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or _utc_now

    def create(self, sources: Iterable[Path], root: Path) -> Iterator[SnapshotActionResult]:
        """Snapshot each source subvolume into root.

        All snapshots of one call share a single creation timestamp.

        Args:
            sources: Source subvolume paths. Duplicates are ignored.
            root: Snapshot root directory.

        Returns:
            Iterator yielding one CREATED result per snapshot.

        Raises:
            RootNotFoundError: If root is not an existing directory.
            NoSourcesError: If sources is empty.
            SnapshotCreateError: If two sources map to the same snapshot
                name, or (while iterating) a snapshot cannot be created.
        """
        self._require_root(root)
        unique_sources = list(dict.fromkeys(sources))
        if not unique_sources:
            raise NoSourcesError

        created_at = self._now()
        plan = self._plan_destinations(unique_sources, root, created_at)

        logger.info("Creating snapshots in %s", root)
        return self._create_each(plan)

    def delete(self, targets: Iterable[Path]) -> Iterator[SnapshotActionResult]:
        """Delete explicitly named snapshots.

        Args:
            targets: Snapshot paths. Duplicates are ignored.

        Returns:
            Iterator yielding one DELETED result per snapshot.

        Raises:
            NoTargetsError: If targets is empty; no volume store call is made.
            VolumeStoreError: (while iterating) If a target is not a
                subvolume or cannot be deleted. Remaining targets are skipped.
        """
        unique_targets = list(dict.fromkeys(targets))
        if not unique_targets:
            raise NoTargetsError
        return self._delete_each(unique_targets)

    def list(self, root: Path) -> Iterator[SnapshotRecord]:
        """List the subvolumes directly under root.

        Entries that are not subvolumes are skipped. Never mutates.

        Args:
            root: Snapshot root directory.

        Returns:
            Iterator yielding one SnapshotRecord per subvolume, in scan order.

        Raises:
            RootNotFoundError: If root is not an existing directory.
        """
        self._require_root(root)
        logger.info("Listing snapshots in %s", root)
        return self._list_each(SnapshotScanner(root))

    def cleanup(
        self,
        root: Path,
        keep: timedelta,
        *,
        dry_run: bool = False,
    ) -> Iterator[SnapshotActionResult]:
        """Delete snapshots under root that are older than keep.

        Only entries whose names decode to a snapshot identity and that
        resolve to a subvolume are ever deleted.

        Args:
            root: Snapshot root directory.
            keep: Retention duration; must be positive.
            dry_run: If True, report expired snapshots without deleting them.

        Returns:
            Iterator yielding one CLEANED result per expired snapshot,
            including failed deletions.

        Raises:
            RootNotFoundError: If root is not an existing directory.
            ValueError: If keep is not positive.
        """
        if keep <= timedelta(0):
            msg = f"Retention duration must be positive, got {keep}"
            raise ValueError(msg)
        self._require_root(root)

        cutoff = compute_cutoff(self._now(), keep)
        logger.info(
            "Cleaning snapshots in %s older than %s (before %s)",
            root,
            format_duration(keep),
            cutoff.isoformat(),
        )
        return self._cleanup_each(SnapshotScanner(root), cutoff, dry_run)

    # === Iteration bodies ===

    def _create_each(self, plan: list[tuple[Path, Path]]) -> Iterator[SnapshotActionResult]:
        for source, destination in plan:
            logger.debug("Processing subvolume: %s", source)
            try:
                handle = self._store.get(source)
            except NotASnapshotError as e:
                msg = f"Failed to get subvolume {source}: {e}"
                raise SnapshotCreateError(source, msg) from e

            self._store.snapshot(handle, destination)
            self._touch_marker(destination)

            yield SnapshotActionResult(
                path=destination,
                action=SnapshotAction.CREATED,
                success=True,
                source=source,
            )

    def _delete_each(self, targets: list[Path]) -> Iterator[SnapshotActionResult]:
        for target in targets:
            logger.debug("Deleting snapshot: %s", target)
            handle = self._store.get(target)
            self._store.delete(handle)
            yield SnapshotActionResult(path=target, action=SnapshotAction.DELETED, success=True)

    def _list_each(self, scanner: SnapshotScanner) -> Iterator[SnapshotRecord]:
        for path in scanner.scan():
            logger.debug("Checking path: %s", path)
            try:
                handle = self._store.get(path)
            except NotASnapshotError:
                logger.debug("Path %s is not a subvolume", path)
                continue

            info = self._store.info(handle)
            yield SnapshotRecord(
                path=path,
                generation=info.generation,
                origin_transaction_id=info.origin_transaction_id,
                identity=decode_name(path.name),
            )

    def _cleanup_each(
        self,
        scanner: SnapshotScanner,
        cutoff: datetime,
        dry_run: bool,
    ) -> Iterator[SnapshotActionResult]:
        registry = SnapshotRegistry.from_scan(scanner.scan())
        logger.debug(
            "Found %d snapshot(s) and %d unrecognized entr(ies) in %s",
            len(registry),
            len(registry.unrecognized),
            scanner.root,
        )

        for snapshot in registry.expired(cutoff):
            path = snapshot.path
            try:
                handle = self._store.get(path)
            except NotASnapshotError:
                logger.debug("Path %s is not a subvolume, skipping", path)
                continue
            except VolumeStoreUnavailableError:
                raise
            except VolumeStoreError as e:
                logger.warning("Cannot resolve %s: %s", path, e)
                yield self._cleanup_result(path, error=str(e))
                continue

            if dry_run:
                logger.info("Dry-run: would delete %s", path)
                yield SnapshotActionResult(
                    path=path,
                    action=SnapshotAction.CLEANED,
                    success=True,
                    dry_run=True,
                )
                continue

            try:
                self._store.delete(handle)
            except VolumeStoreUnavailableError:
                raise
            except VolumeStoreError as e:
                logger.warning("Failed to clean %s: %s", path, e)
                yield self._cleanup_result(path, error=str(e))
                continue

            yield self._cleanup_result(path)

    # === Helpers ===

    def _now(self) -> datetime:
        """Current time truncated to whole seconds."""
        now = self._clock()
        if now.tzinfo is None:
            msg = "Clock must return timezone-aware datetimes"
            raise ValueError(msg)
        return now.replace(microsecond=0)

    @staticmethod
    def _require_root(root: Path) -> None:
        if not root.is_dir():
            raise RootNotFoundError(root)

    @staticmethod
    def _plan_destinations(
        sources: list[Path],
        root: Path,
        created_at: datetime,
    ) -> list[tuple[Path, Path]]:
        """Pair each source with its snapshot destination.

        Raises:
            SnapshotCreateError: If a source has no usable name or two
                sources map to the same destination.
        """
        plan: list[tuple[Path, Path]] = []
        seen: dict[Path, Path] = {}
        for source in sources:
            if not source.name:
                msg = f"Cannot derive a snapshot name from subvolume path {source}"
                raise SnapshotCreateError(source, msg)

            destination = root / encode_name(source.name, created_at)
            if destination in seen:
                msg = (
                    f"Subvolumes {seen[destination]} and {source} would both be "
                    f"snapshotted to {destination}"
                )
                raise SnapshotCreateError(destination, msg)
            seen[destination] = source
            plan.append((source, destination))
        return plan

    @staticmethod
    def _touch_marker(snapshot: Path) -> None:
        marker = snapshot / MARKER_NAME
        try:
            marker.touch(exist_ok=True)
        except OSError as e:
            msg = f"Failed to touch {MARKER_NAME} in snapshot {snapshot}: {e}"
            raise SnapshotCreateError(snapshot, msg) from e

    @staticmethod
    def _cleanup_result(path: Path, error: str | None = None) -> SnapshotActionResult:
        return SnapshotActionResult(
            path=path,
            action=SnapshotAction.CLEANED,
            success=error is None,
            error=error,
        )
