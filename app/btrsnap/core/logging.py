"""Logging setup for the btrsnap CLI.

Log records go to stderr through Rich so they never mix with command
output on stdout. Default level is WARNING, so a successful run is quiet.
"""

import logging

from rich.logging import RichHandler

from btrsnap.utils.formatting import err_console

# Logger that every btrsnap module logs under
ROOT_LOGGER = "btrsnap"


def resolve_level(verbose: bool = False, quiet: bool = False) -> int:
    """Map the global --verbose/--quiet flags to a log level.

    --quiet wins when both are given.
    """
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def configure_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Install the stderr handler on the btrsnap logger.

    Safe to call more than once; the previous handler is replaced.

    Args:
        verbose: Log debug messages.
        quiet: Only log errors.

    Returns:
        The configured btrsnap logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=err_console,
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(resolve_level(verbose=verbose, quiet=quiet))
    return logger
