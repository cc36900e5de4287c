"""
Logging for the camdo namespace.

Every module logs through children of the "camdo" logger. The library stays
silent unless the host opts in: a NullHandler is installed at import time and
configure() attaches a Rich handler writing to stderr.
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger("camdo")
logger.addHandler(logging.NullHandler())


def configure(level=logging.INFO, /, *, colorful=True, console=None):
    """
    attach a RichHandler to the "camdo" logger and set its level.

    parameters
    - level: int | str, forwarded to Logger.setLevel.
    - colorful: when False, the console is created without colour or markup.
    - console: an explicit rich Console to write to (stderr by default).

    returns
    - the installed handler. calling configure() again replaces it.
    """
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    if console is None:
        console = Console(stderr=True, no_color=not colorful, highlight=colorful)

    handler = RichHandler(console=console, show_path=False, markup=False, rich_tracebacks=colorful)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler


__all__ = (
    "logger",
    "configure",
)
