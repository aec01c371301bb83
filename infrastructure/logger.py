"""
RIFF DAG LOGGING - Handler Setup for a Full-Screen Application

Modules log through `logging.getLogger(__name__)`; this module decides
where those records go.

Architecture:
- Console: rich.logging.RichHandler on stderr (before/after the UI)
- File: plain FileHandler when a log file is configured
- Quiet window: while the alternate screen is active, console output
  would corrupt the frame, so the console handler is muted

Usage:
    from infrastructure.logger import setup_logging, quiet_console

    setup_logging(level="INFO", log_file="riff.log")
    with quiet_console():
        run_ui()
"""
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from rich.console import Console
from rich.logging import RichHandler


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_console_handler: Optional[logging.Handler] = None


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[str | Path] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure the root logger once for the process.

    Args:
        level: Logging level name
        log_file: Optional path; records are appended there as plain text
        console: Console for the rich handler (defaults to stderr)

    Returns:
        The root logger
    """
    global _console_handler

    root = logging.getLogger()
    root.setLevel(level.upper())

    for handler in list(root.handlers):
        root.removeHandler(handler)

    _console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    root.addHandler(_console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    return root


@contextmanager
def quiet_console() -> Iterator[None]:
    """Mute the console handler for the duration of the block."""
    handler = _console_handler
    if handler is None:
        yield
        return

    previous = handler.level
    handler.setLevel(logging.CRITICAL + 1)
    try:
        yield
    finally:
        handler.setLevel(previous)
