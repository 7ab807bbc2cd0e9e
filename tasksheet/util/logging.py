"""
Logging configuration for the command line.
"""

import logging

from rich.logging import RichHandler


def configure_logging(verbose: bool = False) -> None:
    """
    Route log records through rich.

    Args:
        verbose: Show DEBUG records instead of WARNING and above
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=verbose, show_path=verbose)],
        force=True,
    )
