"""CLI module for btrsnap."""
