"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest
from btrsnap.snapshots import SnapshotManager
from fakes import FakeVolumeStore, FixedClock


@pytest.fixture
def fake_store() -> FakeVolumeStore:
    """Empty fake volume store."""
    return FakeVolumeStore()


@pytest.fixture
def clock() -> FixedClock:
    """Clock fixed at Unix time 2000."""
    return FixedClock(2000)


@pytest.fixture
def manager(fake_store: FakeVolumeStore, clock: FixedClock) -> SnapshotManager:
    """Snapshot manager over the fake store and fixed clock."""
    return SnapshotManager(fake_store, clock=clock)


@pytest.fixture
def snap_root(tmp_path: Path) -> Path:
    """Existing, empty snapshot root directory."""
    root = tmp_path / "snapshots"
    root.mkdir()
    return root
