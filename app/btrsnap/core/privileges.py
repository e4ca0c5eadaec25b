"""Process privilege checks.

Creating and deleting btrfs subvolumes requires root.
"""

import os


def is_root() -> bool:
    """Check if the process runs with an effective uid of 0."""
    return os.geteuid() == 0


def require_root() -> None:
    """Ensure the process runs as root.

    Raises:
        PermissionError: If the effective uid is not 0.
    """
    if not is_root():
        msg = "Must run with sudo or as root for BTRFS operations"
        raise PermissionError(msg)
