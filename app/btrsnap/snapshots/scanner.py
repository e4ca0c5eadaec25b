"""Snapshot directory scanner.

Enumerates the immediate child directories of a snapshot root. Only
one directory level is ever inspected; nested entries are not
snapshot candidates.
"""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from btrsnap.snapshots.errors import ScanError

logger = logging.getLogger(__name__)


class SnapshotScanner:
    """Yields candidate snapshot directories under a root.

    Candidates are immediate child directories of the root. Symlinks and
    regular files are never candidates. Entries come back in the
    filesystem's enumeration order, which is not sorted.

    Args:
        root: Snapshot root directory to scan.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        """Snapshot root directory being scanned."""
        return self._root

    def scan(self) -> Iterator[Path]:
        """Lazily yield candidate snapshot directories.

        An entry that cannot be inspected is skipped (logged at debug
        level) so one unreadable entry never blocks the rest.

        Yields:
            Absolute paths of child directories of the root.

        Raises:
            ScanError: If the root itself cannot be opened.
        """
        try:
            entries = os.scandir(self._root)
        except OSError as e:
            raise ScanError(self._root, e.strerror or str(e)) from e

        with entries:
            while True:
                try:
                    entry = next(entries)
                except StopIteration:
                    return
                except OSError as e:
                    logger.debug("Directory listing of %s interrupted: %s", self._root, e)
                    return

                candidate = self._classify(entry)
                if candidate is not None:
                    yield candidate

    def _classify(self, entry: os.DirEntry[str]) -> Path | None:
        """Return the entry's path if it is a real directory, else None."""
        try:
            if entry.is_dir(follow_symlinks=False):
                return self._root / entry.name
        except OSError as e:
            logger.debug("Cannot determine type of %s: %s", entry.path, e)
            return None

        logger.debug("Skipping non-directory entry: %s", entry.path)
        return None
