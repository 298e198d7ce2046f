"""Logging setup for the artframe CLI.

Library modules only create ``logging.getLogger(__name__)`` loggers; handlers
are installed here, by the application.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "WARNING", console: Console | None = None) -> logging.Logger:
    """Attach a RichHandler to the ``artframe`` logger and set its level.

    Calling it again replaces the previous handler instead of stacking.
    """
    logger = logging.getLogger("artframe")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger
