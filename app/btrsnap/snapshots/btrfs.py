"""Volume store backed by the btrfs command-line tool.

Wraps ``btrfs subvolume show|snapshot|delete`` behind the VolumeStore
interface. All commands run synchronously through run_command.
"""

import logging
import subprocess
from pathlib import Path

from btrsnap.snapshots.errors import (
    NotASnapshotError,
    SnapshotCreateError,
    SnapshotDeleteError,
    VolumeStoreError,
    VolumeStoreUnavailableError,
)
from btrsnap.snapshots.models import SubvolumeHandle, SubvolumeInfo
from btrsnap.snapshots.store import VolumeStore
from btrsnap.utils.shell import CommandResult, command_exists, format_command, run_command

logger = logging.getLogger(__name__)

BTRFS_COMMAND = "btrfs"

# Deleting a large subvolume can take a while before the command returns
_DELETE_TIMEOUT = 300.0

# Output is parsed, so pin the message locale
_COMMAND_ENV = {"LC_ALL": "C"}

# Keys in `btrfs subvolume show` output
_GENERATION_KEY = "Generation"
_ORIGIN_TRANSID_KEY = "Gen at creation"


class BtrfsVolumeStore(VolumeStore):
    """Volume store that shells out to ``btrfs subvolume``.

    Args:
        command: Name or path of the btrfs executable.
    """

    def __init__(self, command: str = BTRFS_COMMAND) -> None:
        self._command = command

    @property
    def command(self) -> str:
        """Name or path of the btrfs executable."""
        return self._command

    def is_available(self) -> bool:
        """Check if the btrfs executable is on PATH."""
        return command_exists(self._command)

    def get(self, path: Path) -> SubvolumeHandle:
        """Resolve path to a subvolume handle via ``btrfs subvolume show``.

        Args:
            path: Path to resolve.

        Returns:
            SubvolumeHandle for path.

        Raises:
            NotASnapshotError: If path is not a btrfs subvolume.
            VolumeStoreUnavailableError: If btrfs is not installed.
        """
        result = self._run(["subvolume", "show", str(path)], path, NotASnapshotError)
        if not result.success:
            logger.debug("Path %s is not a subvolume: %s", path, result.stderr.strip())
            raise NotASnapshotError(path, f"{path} is not a btrfs subvolume")
        return SubvolumeHandle(path=path)

    def snapshot(self, source: SubvolumeHandle, destination: Path) -> None:
        """Create a writable snapshot of source at destination.

        Raises:
            SnapshotCreateError: If destination exists or btrfs fails.
        """
        if destination.exists():
            msg = f"Snapshot destination already exists: {destination}"
            raise SnapshotCreateError(destination, msg)

        logger.info("Creating snapshot %s of %s", destination, source.path)
        result = self._run(
            ["subvolume", "snapshot", str(source.path), str(destination)],
            destination,
            SnapshotCreateError,
        )
        if not result.success:
            msg = (
                f"Failed to create snapshot {destination} for subvolume {source.path}: "
                f"{_stderr_or_default(result)}"
            )
            raise SnapshotCreateError(destination, msg)

    def delete(self, handle: SubvolumeHandle) -> None:
        """Delete the subvolume behind handle.

        Raises:
            SnapshotDeleteError: If btrfs refuses or fails to delete it.
        """
        logger.info("Deleting subvolume %s", handle.path)
        result = self._run(
            ["subvolume", "delete", str(handle.path)],
            handle.path,
            SnapshotDeleteError,
            timeout=_DELETE_TIMEOUT,
        )
        if not result.success:
            msg = f"Failed to delete snapshot {handle.path}: {_stderr_or_default(result)}"
            raise SnapshotDeleteError(handle.path, msg)

    def info(self, handle: SubvolumeHandle) -> SubvolumeInfo:
        """Read generation and origin transaction id of a subvolume.

        Raises:
            VolumeStoreError: If ``btrfs subvolume show`` fails or its
                output lacks the expected fields.
        """
        result = self._run(["subvolume", "show", str(handle.path)], handle.path, VolumeStoreError)
        if not result.success:
            msg = f"Failed to query subvolume {handle.path}: {_stderr_or_default(result)}"
            raise VolumeStoreError(handle.path, msg)
        return parse_subvolume_show(result.stdout, handle.path)

    def _run(
        self,
        args: list[str],
        path: Path,
        error_cls: type[VolumeStoreError],
        *,
        timeout: float = 60.0,
    ) -> CommandResult:
        """Run a btrfs subcommand, translating process-level failures.

        Args:
            args: Arguments following the btrfs executable.
            path: Path the command acts on (for error messages).
            error_cls: Exception class raised on timeout or OS errors.
            timeout: Seconds to wait for the command.

        Returns:
            CommandResult of the finished command.

        Raises:
            VolumeStoreUnavailableError: If btrfs is not installed.
            VolumeStoreError: (error_cls) on timeout or OS errors.
        """
        cmd = [self._command, *args]
        logger.debug("Running: %s", format_command(cmd))
        try:
            result = run_command(cmd, timeout=timeout, env=_COMMAND_ENV)
        except FileNotFoundError as e:
            msg = f"{self._command} command not found; install btrfs-progs"
            raise VolumeStoreUnavailableError(path, msg) from e
        except subprocess.TimeoutExpired as e:
            msg = f"{format_command(cmd)} timed out after {timeout:.0f}s"
            raise error_cls(path, msg) from e
        except OSError as e:
            msg = f"Cannot run {self._command} for {path}: {e}"
            raise error_cls(path, msg) from e
        if not result.success:
            logger.debug("%s exited with code %d", result.command_line, result.returncode)
        return result


def parse_subvolume_show(output: str, path: Path) -> SubvolumeInfo:
    """Parse ``btrfs subvolume show`` output into SubvolumeInfo.

    Args:
        output: Standard output of ``btrfs subvolume show``.
        path: Subvolume path (for error messages).

    Returns:
        SubvolumeInfo with generation and origin transaction id.

    Raises:
        VolumeStoreError: If either field is missing or not an integer.
    """
    fields: dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition(":")
        if sep:
            fields[key.strip()] = value.strip()

    try:
        return SubvolumeInfo(
            generation=int(fields[_GENERATION_KEY]),
            origin_transaction_id=int(fields[_ORIGIN_TRANSID_KEY]),
        )
    except (KeyError, ValueError) as e:
        msg = f"Unexpected 'btrfs subvolume show' output for {path}: bad or missing field {e}"
        raise VolumeStoreError(path, msg) from e


def _stderr_or_default(result: CommandResult) -> str:
    """Return trimmed stderr, or a generic message when it is empty."""
    return result.stderr.strip() or f"exit code {result.returncode}"
