"""
Terminal key input.

decode_keys() turns raw terminal bytes (already decoded to str) into key
names the state machine understands:

    "up", "down", "pageup", "pagedown", "home", "end", "enter", "esc",
    "backspace", "tab", "ctrl-<letter>", "resize", or a single character

KeyReader owns the controlling terminal while the UI runs: it switches
the TTY to cbreak mode, blocks until input (or a window resize) arrives,
and restores the terminal on exit.
"""
import codecs
import logging
import os
import select
import signal
import termios
import tty
from typing import List, Optional

logger = logging.getLogger(__name__)

UP = "up"
DOWN = "down"
PAGE_UP = "pageup"
PAGE_DOWN = "pagedown"
HOME = "home"
END = "end"
ENTER = "enter"
ESC = "esc"
BACKSPACE = "backspace"
TAB = "tab"
CTRL_C = "ctrl-c"
RESIZE = "resize"

# CSI / SS3 sequences, longest first so prefixes never shadow them
ESCAPE_SEQUENCES = {
    "\x1b[5~": PAGE_UP,
    "\x1b[6~": PAGE_DOWN,
    "\x1b[1~": HOME,
    "\x1b[4~": END,
    "\x1b[7~": HOME,
    "\x1b[8~": END,
    "\x1b[A": UP,
    "\x1b[B": DOWN,
    "\x1b[H": HOME,
    "\x1b[F": END,
    "\x1bOA": UP,
    "\x1bOB": DOWN,
    "\x1bOH": HOME,
    "\x1bOF": END,
}

SINGLE_KEYS = {
    "\r": ENTER,
    "\n": ENTER,
    "\t": TAB,
    "\x7f": BACKSPACE,
    "\x08": BACKSPACE,
}


def _skip_unknown_sequence(data: str, i: int) -> int:
    """Index just past an unrecognized CSI/SS3 sequence starting at `i`."""
    j = i + 2
    if data[i + 1] == "O":
        return min(j + 1, len(data))
    while j < len(data) and not ("\x40" <= data[j] <= "\x7e"):
        j += 1
    return min(j + 1, len(data))


def decode_keys(data: str) -> List[str]:
    """
    Split a chunk of terminal input into key names.

    A lone ESC (or ESC followed by a non-sequence character) is the
    escape key. Unknown escape sequences are dropped.
    """
    keys: List[str] = []
    i = 0
    while i < len(data):
        ch = data[i]

        if ch == "\x1b":
            if i + 1 < len(data) and data[i + 1] in "[O":
                for seq, name in ESCAPE_SEQUENCES.items():
                    if data.startswith(seq, i):
                        keys.append(name)
                        i += len(seq)
                        break
                else:
                    i = _skip_unknown_sequence(data, i)
                continue
            keys.append(ESC)
            i += 1
            continue

        if ch in SINGLE_KEYS:
            keys.append(SINGLE_KEYS[ch])
        elif ord(ch) < 0x20:
            keys.append(f"ctrl-{chr(ord(ch) + 0x60)}")
        else:
            keys.append(ch)
        i += 1

    return keys


class KeyReader:
    """
    Context manager that reads keys from the controlling terminal.

    Usage:
        with KeyReader() as reader:
            for key in reader.read():
                ...

    Raises:
        OSError: If no controlling terminal can be opened
    """

    def __init__(self, tty_path: str = "/dev/tty"):
        self._tty_path = tty_path
        self._fd: Optional[int] = None
        self._saved: Optional[list] = None
        self._wake_r: Optional[int] = None
        self._wake_w: Optional[int] = None
        self._previous_winch = None
        # Keeps a multibyte character split across reads until it completes
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def __enter__(self) -> "KeyReader":
        self._fd = os.open(self._tty_path, os.O_RDONLY)
        self._saved = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)

        self._wake_r, self._wake_w = os.pipe()
        os.set_blocking(self._wake_w, False)
        self._previous_winch = signal.signal(signal.SIGWINCH, self._on_resize)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._previous_winch is not None:
            signal.signal(signal.SIGWINCH, self._previous_winch)
        if self._fd is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
            os.close(self._fd)
        for fd in (self._wake_r, self._wake_w):
            if fd is not None:
                os.close(fd)
        self._fd = self._wake_r = self._wake_w = None

    def _on_resize(self, signum, frame) -> None:
        try:
            os.write(self._wake_w, b"r")
        except BlockingIOError:
            pass

    def feed(self, data: bytes) -> List[str]:
        """Decode raw terminal bytes into keys, buffering incomplete UTF-8."""
        return decode_keys(self._decoder.decode(data))

    def read(self) -> List[str]:
        """Block until input or a resize; return the decoded keys."""
        ready, _, _ = select.select([self._fd, self._wake_r], [], [])

        keys: List[str] = []
        if self._wake_r in ready:
            os.read(self._wake_r, 64)
            keys.append(RESIZE)
        if self._fd in ready:
            keys.extend(self.feed(os.read(self._fd, 1024)))
        return keys
