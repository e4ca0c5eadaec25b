"""Unit tests for logging setup."""

import logging

import pytest
from btrsnap.core.logging import ROOT_LOGGER, configure_logging, resolve_level
from rich.logging import RichHandler


class TestResolveLevel:
    """Tests for resolve_level."""

    @pytest.mark.parametrize(
        ("verbose", "quiet", "expected"),
        [
            (False, False, logging.WARNING),
            (True, False, logging.DEBUG),
            (False, True, logging.ERROR),
            (True, True, logging.ERROR),
        ],
    )
    def test_levels(self, verbose: bool, quiet: bool, expected: int) -> None:
        """Flags map to levels, with --quiet taking precedence."""
        assert resolve_level(verbose=verbose, quiet=quiet) == expected


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_installs_single_rich_handler(self) -> None:
        """Repeated calls replace the handler instead of stacking them."""
        configure_logging()
        logger = configure_logging(verbose=True)

        assert logger.name == ROOT_LOGGER
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)
        assert logger.level == logging.DEBUG

    def test_module_loggers_inherit_level(self) -> None:
        """Package module loggers follow the configured level."""
        configure_logging(quiet=True)

        child = logging.getLogger("btrsnap.snapshots.lifecycle")

        assert child.getEffectiveLevel() == logging.ERROR
