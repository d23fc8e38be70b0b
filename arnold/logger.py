"""Logging setup for the arnold CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "arnold"


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Get a logger under the arnold namespace.

    The root ``arnold`` logger gets a RichHandler writing to stderr the first
    time it is requested; child loggers propagate to it.

    Args:
        name: Logger name, usually the calling module's ``__name__``

    Returns:
        logging.Logger instance
    """
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        root.setLevel(logging.WARNING)
        root.propagate = False

    return logging.getLogger(name)


def set_verbose(verbose: bool) -> None:
    """Switch the arnold loggers between WARNING and DEBUG."""
    get_logger().setLevel(logging.DEBUG if verbose else logging.WARNING)
