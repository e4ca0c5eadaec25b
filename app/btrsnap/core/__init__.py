"""Core infrastructure for btrsnap.

Configuration loading, parameter resolution, logging setup and
privilege checks shared by the CLI commands.
"""
