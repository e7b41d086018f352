# pyright: standard

"""svn-hotbackup: svn_hotbackup/__logger__.py
A common logger for displaying through rich.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Initialize basic console and handler
cons = Console(stderr=True)
rich_handler = RichHandler(console=cons, show_path=False)
# Package logger, module loggers propagate through it to the root handlers
logger = logging.getLogger("svn_hotbackup")

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Handlers installed by create_logger, closed again by shutdown_logger
_installed: list[logging.Handler] = []
_previous_level: Optional[int] = None


def create_logger(level="INFO", log_file: Optional[str] = None) -> None:
    """Set up process-wide logging once, before any backup work starts.

    Args:
        level: Log level name or number for the console and file handlers
        log_file: Optional path of a plain-text log file
    """
    # pylint: disable=global-statement
    global cons, rich_handler, _previous_level

    shutdown_logger()

    cons = Console(stderr=True)
    rich_handler = RichHandler(console=cons, show_path=False)
    handlers: list[logging.Handler] = [rich_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(file_handler)

    root = logging.getLogger()
    _previous_level = root.level
    root.setLevel(level)
    for handler in handlers:
        if handler is rich_handler:
            handler.setFormatter(logging.Formatter("%(message)s", datefmt="%H:%M:%S"))
        root.addHandler(handler)
        _installed.append(handler)


def shutdown_logger() -> None:
    """Flush and close every handler installed by create_logger."""
    # pylint: disable=global-statement
    global _previous_level

    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        try:
            handler.flush()
        finally:
            handler.close()
    if _previous_level is not None:
        root.setLevel(_previous_level)
        _previous_level = None
