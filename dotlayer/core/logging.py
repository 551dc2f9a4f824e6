"""
Rich-based logging system

Every progress line starts with a bracketed action tag (``[link]``,
``[remove]``, ``[hook]`` ...). The console handler colours those tags and
the file handler keeps them as plain text.
"""
import logging
from typing import Optional
from pathlib import Path

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme
from rich.traceback import install as install_traceback


LOGGER_NAME = "dotlayer"

ACTION_TAGS = ("add", "hook", "link", "mkdir", "remove", "resolve", "settings")

_theme = Theme({
    "dotlayer.action": "bold cyan",
    "dotlayer.test": "bold magenta",
})


class ProgressTagHighlighter(RegexHighlighter):
    """Highlight the leading action tag of a progress line"""

    base_style = "dotlayer."
    highlights = [
        r"^(?P<action>\[(?:" + "|".join(ACTION_TAGS) + r")\])",
        r"^(?P<test>\[test\])",
    ]


# Global console instances (streams looked up on each write)
_stdout_console = Console(theme=_theme)
_stderr_console = Console(stderr=True, theme=_theme)

# Install rich traceback handler
install_traceback(show_locals=False, width=120)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    rich_tracebacks: bool = True,
) -> None:
    """
    Attach handlers to the ``dotlayer`` logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file receiving the same lines with timestamps
        rich_tracebacks: Enable rich tracebacks
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(log_level)
    package_logger.handlers.clear()

    # Progress lines go to stderr so stdout stays clean for banners
    rich_handler = RichHandler(
        console=_stderr_console,
        show_time=False,
        show_path=log_level <= logging.DEBUG,
        rich_tracebacks=rich_tracebacks,
        markup=False,
        highlighter=ProgressTagHighlighter(),
    )
    rich_handler.setLevel(log_level)
    package_logger.addHandler(rich_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            logging.Formatter('%(asctime)s %(levelname)-8s %(message)s')
        )
        package_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get logger instance (usually for __name__, which lives under dotlayer)"""
    return logging.getLogger(name)


def get_stdout_console() -> Console:
    """Get stdout console for user-facing output"""
    return _stdout_console


def get_stderr_console() -> Console:
    """Get stderr console for errors and logs"""
    return _stderr_console
