"""btrsnap - BTRFS snapshot manager.

Creates, lists, deletes and prunes point-in-time snapshots of btrfs
subvolumes kept in a single flat snapshot directory.
"""

__version__ = "0.3.0"
