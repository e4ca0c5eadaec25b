"""Unit tests for snapshot lifecycle operations."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from btrsnap.snapshots import (
    MARKER_NAME,
    NoSourcesError,
    NoTargetsError,
    NotASnapshotError,
    RootNotFoundError,
    SnapshotAction,
    SnapshotCreateError,
    SnapshotDeleteError,
    SnapshotIdentity,
    SnapshotManager,
    VolumeStoreError,
    VolumeStoreUnavailableError,
)
from fakes import FakeVolumeStore, FixedClock


def _populate(store: FakeVolumeStore, root: Path) -> None:
    """Three snapshots plus a directory that is not a snapshot name."""
    for name in ("app-1000", "app-2000", "data-1500"):
        store.add_subvolume(root / name)
    (root / "not-a-snapshot").mkdir()


# =============================================================================
# create
# =============================================================================


class TestCreate:
    """Tests for SnapshotManager.create."""

    def test_creates_named_snapshot_with_marker(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
        tmp_path: Path,
    ) -> None:
        """Each source is snapshotted to <name>-<epoch> with an empty marker."""
        source = fake_store.add_subvolume(tmp_path / "vols" / "@home")

        results = list(manager.create([source], snap_root))

        destination = snap_root / "@home-2000"
        assert [r.path for r in results] == [destination]
        assert results[0].action == SnapshotAction.CREATED
        assert results[0].source == source
        assert results[0].success is True
        assert destination in fake_store.subvolumes
        marker = destination / MARKER_NAME
        assert marker.is_file()
        assert marker.stat().st_size == 0

    def test_all_snapshots_share_timestamp(
        self,
        fake_store: FakeVolumeStore,
        snap_root: Path,
        tmp_path: Path,
    ) -> None:
        """The clock is read once per call, so every name has the same epoch."""
        times = iter([2000, 2001, 2002])
        manager = SnapshotManager(
            fake_store,
            clock=lambda: datetime.fromtimestamp(next(times), tz=UTC),
        )
        sources = [fake_store.add_subvolume(tmp_path / name) for name in ("a", "b", "c")]

        results = list(manager.create(sources, snap_root))

        assert [r.path.name for r in results] == ["a-2000", "b-2000", "c-2000"]

    def test_truncates_to_whole_seconds(
        self,
        fake_store: FakeVolumeStore,
        snap_root: Path,
        tmp_path: Path,
    ) -> None:
        """Sub-second precision is dropped from the name."""
        now = datetime.fromtimestamp(2000, tz=UTC) + timedelta(microseconds=999_999)
        manager = SnapshotManager(fake_store, clock=lambda: now)
        source = fake_store.add_subvolume(tmp_path / "app")

        results = list(manager.create([source], snap_root))

        assert results[0].path.name == "app-2000"

    def test_duplicate_sources_snapshotted_once(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
        tmp_path: Path,
    ) -> None:
        """Repeating a source path does not create a second snapshot."""
        source = fake_store.add_subvolume(tmp_path / "app")

        results = list(manager.create([source, source], snap_root))

        assert len(results) == 1

    def test_colliding_names_rejected_before_any_store_call(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
        tmp_path: Path,
    ) -> None:
        """Two sources with the same final segment would collide."""
        first = fake_store.add_subvolume(tmp_path / "one" / "app")
        second = fake_store.add_subvolume(tmp_path / "two" / "app")

        with pytest.raises(SnapshotCreateError, match="app-2000"):
            manager.create([first, second], snap_root)
        assert fake_store.calls == []

    def test_empty_sources_rejected(self, manager: SnapshotManager, snap_root: Path) -> None:
        """Creating with no sources is an error."""
        with pytest.raises(NoSourcesError):
            manager.create([], snap_root)

    def test_missing_root_rejected(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        tmp_path: Path,
    ) -> None:
        """The snapshot root must exist; no store call is made."""
        source = fake_store.add_subvolume(tmp_path / "app")

        with pytest.raises(RootNotFoundError, match="missing"):
            manager.create([source], tmp_path / "missing")
        assert fake_store.calls == []

    def test_non_subvolume_source_aborts(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
        tmp_path: Path,
    ) -> None:
        """A source that is not a subvolume stops the run at that source."""
        good = fake_store.add_subvolume(tmp_path / "good")
        bad = tmp_path / "plain"
        bad.mkdir()
        later = fake_store.add_subvolume(tmp_path / "later")

        results = manager.create([good, bad, later], snap_root)

        assert next(results).path == snap_root / "good-2000"
        with pytest.raises(SnapshotCreateError, match="plain"):
            next(results)
        assert not (snap_root / "later-2000").exists()

    def test_existing_destination_aborts(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
        tmp_path: Path,
    ) -> None:
        """An existing entry with the target name is never overwritten."""
        source = fake_store.add_subvolume(tmp_path / "app")
        (snap_root / "app-2000").mkdir()

        with pytest.raises(SnapshotCreateError, match="already exists"):
            list(manager.create([source], snap_root))

    def test_naive_clock_rejected(
        self,
        fake_store: FakeVolumeStore,
        snap_root: Path,
        tmp_path: Path,
    ) -> None:
        """Clocks must return timezone-aware datetimes."""
        manager = SnapshotManager(fake_store, clock=lambda: datetime(2024, 1, 1))
        source = fake_store.add_subvolume(tmp_path / "app")

        with pytest.raises(ValueError, match="timezone-aware"):
            manager.create([source], snap_root)


# =============================================================================
# delete
# =============================================================================


class TestDelete:
    """Tests for SnapshotManager.delete."""

    def test_deletes_targets_in_order(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """Each target is resolved and deleted."""
        first = fake_store.add_subvolume(snap_root / "app-1000")
        second = fake_store.add_subvolume(snap_root / "app-2000")

        results = list(manager.delete([first, second]))

        assert [r.path for r in results] == [first, second]
        assert all(r.action == SnapshotAction.DELETED for r in results)
        assert fake_store.operations("delete") == [first, second]
        assert not first.exists()

    def test_deletes_any_subvolume_name(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """Explicit deletion does not require a snapshot-style name."""
        target = fake_store.add_subvolume(snap_root / "scratch")

        results = list(manager.delete([target]))

        assert results[0].path == target

    def test_empty_targets_rejected(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
    ) -> None:
        """No targets is an error and touches nothing."""
        with pytest.raises(NoTargetsError):
            manager.delete([])
        assert fake_store.calls == []

    def test_first_failure_stops_run(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """Targets after a failed one are not attempted."""
        first = fake_store.add_subvolume(snap_root / "app-1000")
        broken = fake_store.add_subvolume(snap_root / "app-1500")
        last = fake_store.add_subvolume(snap_root / "app-2000")
        fake_store.delete_errors[broken] = SnapshotDeleteError(broken, "device busy")

        results = manager.delete([first, broken, last])

        assert next(results).path == first
        with pytest.raises(SnapshotDeleteError, match="device busy"):
            next(results)
        assert last.exists()
        assert fake_store.operations("delete") == [first, broken]

    def test_non_subvolume_target_fails(
        self,
        manager: SnapshotManager,
        snap_root: Path,
    ) -> None:
        """A plain directory cannot be deleted as a snapshot."""
        plain = snap_root / "plain"
        plain.mkdir()

        with pytest.raises(NotASnapshotError):
            list(manager.delete([plain]))
        assert plain.exists()


# =============================================================================
# list
# =============================================================================


class TestList:
    """Tests for SnapshotManager.list."""

    def test_lists_subvolumes_with_metadata(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """Each subvolume is reported with generation and origin id."""
        fake_store.add_subvolume(snap_root / "app-1000", generation=7)

        records = list(manager.list(snap_root))

        assert len(records) == 1
        record = records[0]
        assert record.path == snap_root / "app-1000"
        assert record.generation == 7
        assert record.origin_transaction_id == 7
        assert record.identity == SnapshotIdentity(
            source_name="app",
            created_at=datetime.fromtimestamp(1000, tz=UTC),
        )

    def test_skips_non_subvolumes(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """Plain directories and files are left out."""
        _populate(fake_store, snap_root)
        (snap_root / "notes.txt").write_text("")

        names = {r.path.name for r in manager.list(snap_root)}

        assert names == {"app-1000", "app-2000", "data-1500"}

    def test_lists_subvolume_without_snapshot_name(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """Subvolumes with other names are listed without an identity."""
        fake_store.add_subvolume(snap_root / "scratch")

        records = list(manager.list(snap_root))

        assert records[0].identity is None

    def test_never_mutates(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """Listing only resolves and queries entries."""
        _populate(fake_store, snap_root)

        list(manager.list(snap_root))

        assert {op for op, _ in fake_store.calls} <= {"get", "info"}

    def test_missing_root_rejected(self, manager: SnapshotManager, tmp_path: Path) -> None:
        """The root must exist."""
        with pytest.raises(RootNotFoundError):
            manager.list(tmp_path / "missing")


# =============================================================================
# cleanup
# =============================================================================


class TestCleanup:
    """Tests for SnapshotManager.cleanup."""

    def test_deletes_only_expired_snapshots(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """With now=2000 and keep=400s, snapshots before 1600 are deleted."""
        _populate(fake_store, snap_root)

        results = list(manager.cleanup(snap_root, timedelta(seconds=400)))

        cleaned = {r.path.name for r in results}
        assert cleaned == {"app-1000", "data-1500"}
        assert all(r.action == SnapshotAction.CLEANED and r.success for r in results)
        assert sorted(p.name for p in snap_root.iterdir()) == ["app-2000", "not-a-snapshot"]

    def test_snapshot_at_cutoff_is_kept(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """created_at == cutoff is retained."""
        fake_store.add_subvolume(snap_root / "app-1600")

        assert list(manager.cleanup(snap_root, timedelta(seconds=400))) == []
        assert (snap_root / "app-1600").exists()

    def test_never_touches_unrecognized_names(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """Subvolumes whose names do not decode are never resolved or deleted."""
        scratch = fake_store.add_subvolume(snap_root / "scratch")

        list(manager.cleanup(snap_root, timedelta(seconds=1)))

        assert scratch not in fake_store.operations("get")
        assert scratch.exists()

    def test_skips_expired_name_that_is_not_a_subvolume(
        self,
        manager: SnapshotManager,
        snap_root: Path,
    ) -> None:
        """A plain directory with a snapshot name is left alone."""
        (snap_root / "app-1000").mkdir()

        assert list(manager.cleanup(snap_root, timedelta(seconds=400))) == []
        assert (snap_root / "app-1000").exists()

    def test_continues_after_delete_failure(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """A failed deletion is reported and the sweep goes on."""
        broken = fake_store.add_subvolume(snap_root / "app-1000")
        other = fake_store.add_subvolume(snap_root / "data-1500")
        fake_store.delete_errors[broken] = SnapshotDeleteError(broken, "device busy")

        results = {r.path: r for r in manager.cleanup(snap_root, timedelta(seconds=400))}

        assert results[broken].success is False
        assert results[broken].error == "device busy"
        assert results[other].success is True
        assert broken.exists()
        assert not other.exists()

    def test_continues_after_resolve_failure(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """Store errors other than not-a-subvolume are reported per entry."""
        broken = fake_store.add_subvolume(snap_root / "app-1000")
        other = fake_store.add_subvolume(snap_root / "data-1500")
        fake_store.get_errors[broken] = VolumeStoreError(broken, "permission denied")

        results = {r.path: r for r in manager.cleanup(snap_root, timedelta(seconds=400))}

        assert results[broken].success is False
        assert results[other].success is True

    def test_unavailable_store_is_fatal(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """A missing backend aborts the sweep instead of failing every entry."""
        target = fake_store.add_subvolume(snap_root / "app-1000")
        fake_store.get_errors[target] = VolumeStoreUnavailableError(target, "btrfs not found")

        with pytest.raises(VolumeStoreUnavailableError):
            list(manager.cleanup(snap_root, timedelta(seconds=400)))

    def test_dry_run_deletes_nothing(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """Dry-run reports what would be cleaned without calling delete."""
        _populate(fake_store, snap_root)

        results = list(manager.cleanup(snap_root, timedelta(seconds=400), dry_run=True))

        assert {r.path.name for r in results} == {"app-1000", "data-1500"}
        assert all(r.dry_run for r in results)
        assert fake_store.operations("delete") == []
        assert (snap_root / "app-1000").exists()

    def test_second_run_is_a_no_op(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
    ) -> None:
        """Cleanup is idempotent for a fixed clock."""
        _populate(fake_store, snap_root)
        list(manager.cleanup(snap_root, timedelta(seconds=400)))

        assert list(manager.cleanup(snap_root, timedelta(seconds=400))) == []

    def test_later_clock_expires_more(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        clock: FixedClock,
        snap_root: Path,
    ) -> None:
        """Advancing the clock moves the cutoff forward."""
        _populate(fake_store, snap_root)
        list(manager.cleanup(snap_root, timedelta(seconds=400)))
        clock.now = datetime.fromtimestamp(3000, tz=UTC)

        results = list(manager.cleanup(snap_root, timedelta(seconds=400)))

        assert [r.path.name for r in results] == ["app-2000"]

    @pytest.mark.parametrize("keep", [timedelta(0), timedelta(seconds=-1)])
    def test_non_positive_keep_rejected(
        self,
        manager: SnapshotManager,
        fake_store: FakeVolumeStore,
        snap_root: Path,
        keep: timedelta,
    ) -> None:
        """Zero or negative retention would delete everything and is refused."""
        _populate(fake_store, snap_root)

        with pytest.raises(ValueError, match="positive"):
            manager.cleanup(snap_root, keep)
        assert fake_store.calls == []

    def test_missing_root_rejected(self, manager: SnapshotManager, tmp_path: Path) -> None:
        """The root must exist."""
        with pytest.raises(RootNotFoundError):
            manager.cleanup(tmp_path / "missing", timedelta(days=1))
