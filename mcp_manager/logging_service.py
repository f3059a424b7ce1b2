"""Console logging setup.

Every module logs through ``logging.getLogger(__name__)``; this module only
decides where records go. Output goes to stderr so command output on stdout
stays clean.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER_NAME = "mcp_manager"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a rich stderr handler to the package logger.

    Safe to call more than once; the handler is installed a single time.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        logger.addHandler(handler)

    return logger
