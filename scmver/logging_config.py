"""
Logging configuration for scmver.

All diagnostics go to stderr so the version itself can be captured
cleanly from stdout.
"""

import sys

from loguru import logger
from rich.console import Console

LOG_FORMAT = '<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {message}'


def setup_logging(log_level: str = 'WARNING', console: Console = None) -> None:
    """
    Set up logging, optionally routed through a Rich console.

    Args:
        log_level: Logging level (DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL)
        console: Rich Console writing to stderr (optional)
    """
    # VERBOSE sits between DEBUG (10) and INFO (20)
    try:
        logger.level("VERBOSE", no=15, color="<cyan>")
    except (TypeError, ValueError):
        pass

    logger.remove()

    if console:
        logger.add(
            lambda msg: console.print(msg, end='', markup=False, highlight=False),
            level=log_level,
            format=LOG_FORMAT,
            colorize=False,
        )
    else:
        logger.add(
            sys.stderr,
            level=log_level,
            format=LOG_FORMAT,
            colorize=True,
        )
