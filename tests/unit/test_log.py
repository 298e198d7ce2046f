"""Tests for CLI logging setup."""

from __future__ import annotations

import io
import logging

from rich.console import Console
from rich.logging import RichHandler

from artframe.log import configure_logging


def _rich_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if isinstance(h, RichHandler)]


def test_configure_logging_sets_level_and_handler() -> None:
    logger = configure_logging("info")
    assert logger.name == "artframe"
    assert logger.level == logging.INFO
    assert len(_rich_handlers(logger)) == 1


def test_configure_logging_does_not_stack_handlers() -> None:
    configure_logging("WARNING")
    logger = configure_logging("DEBUG")
    assert len(_rich_handlers(logger)) == 1
    assert logger.level == logging.DEBUG


def test_module_loggers_reach_the_handler() -> None:
    buf = io.StringIO()
    configure_logging("WARNING", console=Console(file=buf, width=200))
    logging.getLogger("artframe.provider.store").warning("Update of %s matched no rows", "/sources/9")
    logging.getLogger("artframe.provider.store").info("hidden")
    assert "/sources/9" in buf.getvalue()
    assert "hidden" not in buf.getvalue()
