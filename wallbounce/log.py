"""
Logging setup. Modules log through `logging.getLogger(__name__)`;
the CLI routes records to a rich console.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "wallbounce"

_console = Console(stderr=True)


def setup_logging(level: str = "INFO", console: Optional[Console] = None) -> logging.Logger:
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    for handler in logger.handlers[:]:
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or _console,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
