"""
Logging configuration for ldtk2tscn.

All modules log under the ``ldtk2tscn`` namespace; the CLI configures the
root handler once via :func:`setup_logging`.
"""

import logging
import sys
from typing import Optional, TextIO

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def resolve_level(verbose: bool = False, debug: bool = False, quiet: bool = False) -> int:
    """Map CLI verbosity switches to a logging level. ``debug`` wins over ``quiet``."""
    if debug:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.INFO
    return logging.WARNING


def setup_logging(
    verbose: bool = False,
    debug: bool = False,
    quiet: bool = False,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    Configure logging for ldtk2tscn.

    Args:
        verbose: If True, show INFO level messages
        debug: If True, show DEBUG level messages (implies verbose)
        quiet: If True, only show errors (per-tile warnings are still collected)
        stream: Output stream for log records (defaults to stderr, stdout carries
            previews and listings)

    Returns:
        Configured logger instance
    """
    level = resolve_level(verbose, debug, quiet)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(stream if stream is not None else sys.stderr)
        ],
        force=True  # Override any existing configuration
    )

    logger = logging.getLogger('ldtk2tscn')
    logger.setLevel(level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Optional module name (defaults to 'ldtk2tscn')

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f'ldtk2tscn.{name}')
    return logging.getLogger('ldtk2tscn')
