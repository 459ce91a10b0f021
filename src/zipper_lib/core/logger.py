# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from .config import CFG


def is_debug_mode() -> bool:
    """Return True if the zipper debug environment variable is set."""
    return os.environ.get(CFG.env_vars.debug_mode) is not None


def get_logger(name: str, show_time: bool = False) -> logging.Logger:
    """
    Return a logger with unified formatting.

    Records are rendered on stderr by rich's RichHandler. In debug mode,
    the logger also emits debug records and always shows timestamps.
    Calling this function repeatedly for the same name does not attach
    additional handlers.
    """
    logger = logging.getLogger(name)

    level = logging.DEBUG if is_debug_mode() else logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    for handler in logger.handlers:
        if isinstance(handler, RichHandler):
            handler.setLevel(level)
            return logger

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        markup=False,
        show_path=False,
        show_level=True,
        show_time=show_time or level == logging.DEBUG,
        log_time_format=CFG.date_formats.standard,
        tracebacks_width=None,
        tracebacks_code_width=None,
    )
    handler.setLevel(level)
    logger.addHandler(handler)

    return logger
