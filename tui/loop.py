"""
The interactive loop: block on a key, apply it, redraw once.

There are no timers and no background work. Each input event yields at
most one state transition followed by one full render.
"""
import logging
from typing import Optional

from rich.console import Console
from rich.live import Live

from infrastructure.logger import quiet_console
from tui.keys import KeyReader
from tui.state import AppState
from viz.panes import render_frame

logger = logging.getLogger(__name__)


def run_app(state: AppState, console: Optional[Console] = None, reader: Optional[KeyReader] = None) -> None:
    """
    Run until the quit key is pressed.

    The alternate screen is entered on start and the terminal is restored
    on every exit path, including exceptions and Ctrl-C.

    Raises:
        OSError: If the controlling terminal cannot be opened
    """
    console = console or Console()
    reader = reader or KeyReader()

    with reader, quiet_console(), Live(
        render_frame(state, console.size.height),
        console=console,
        screen=True,
        auto_refresh=False,
        transient=True,
    ) as live:
        logger.info("UI started with %d node(s)", state.store.node_count)
        try:
            while True:
                for key in reader.read():
                    if state.handle_key(key):
                        logger.info("Quit requested")
                        return
                live.update(render_frame(state, console.size.height), refresh=True)
        except KeyboardInterrupt:
            logger.info("Interrupted")
