"""Fixtures for CLI command tests.

Every test runs as if root, with the fake volume store behind all
commands and no configuration file taken from the environment.
"""

from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from btrsnap.core.config import CONFIG_ENV_VAR
from btrsnap.snapshots import SnapshotManager

COMMAND_MODULES = ("create", "delete", "listing", "cleanup")


@pytest.fixture(autouse=True)
def as_root() -> Iterator[None]:
    """Pretend the process runs as root."""
    with patch("btrsnap.core.privileges.is_root", return_value=True):
        yield


@pytest.fixture(autouse=True)
def no_env_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ignore any BTRSNAP_CONFIG set in the developer's environment."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture(autouse=True)
def cli_manager(manager: SnapshotManager) -> Iterator[SnapshotManager]:
    """Route every command's build_manager() to the fake-store manager."""
    patchers = [
        patch(f"btrsnap.cli.commands.{name}.build_manager", return_value=manager)
        for name in COMMAND_MODULES
    ]
    for patcher in patchers:
        patcher.start()
    yield manager
    for patcher in patchers:
        patcher.stop()


@pytest.fixture
def root(snap_root: Path) -> Path:
    """Canonical snapshot root, as a loaded config would report it."""
    return snap_root.resolve()


ConfigWriter = Callable[..., Path]


@pytest.fixture
def make_config(tmp_path: Path) -> ConfigWriter:
    """Factory writing a TOML config file and returning its path."""

    def _write(
        snap_dir: Path,
        base: Path | None = None,
        names: list[str] | None = None,
        keep: str | None = None,
    ) -> Path:
        lines = [f'snap-dir = "{snap_dir}"']
        if base is not None:
            lines.append(f'subvol-base = "{base}"')
            quoted = ", ".join(f'"{n}"' for n in names or [])
            lines.append(f"subvol-names = [{quoted}]")
        if keep is not None:
            lines.extend(["", "[cleanup]", f'keep = "{keep}"'])
        path = tmp_path / "btrsnap.toml"
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write
