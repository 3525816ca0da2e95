"""Single-keypress input from the terminal."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Protocol, TextIO

__all__ = ["KeyEvent", "KeySource", "TerminalKeySource"]


@dataclass(frozen=True)
class KeyEvent:
    """One keypress, reduced to the character it produced."""

    char: str


class KeySource(Protocol):
    def next_key_event(self) -> KeyEvent:
        """Block until a key is pressed and return it."""

    def drain(self) -> None:
        """Discard any input queued since the last read."""


class TerminalKeySource:
    """Read keys from ``stream`` without waiting for Enter.

    On a POSIX terminal the stream is switched to cbreak mode for the
    duration of each read, so Ctrl-C still raises ``KeyboardInterrupt``.
    Non-terminal streams are read one character at a time and raise
    ``EOFError`` once exhausted.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdin

    def next_key_event(self) -> KeyEvent:
        if not self._is_terminal():
            char = self._stream.read(1)
            if not char:
                raise EOFError("input closed")
            return KeyEvent(char)
        if sys.platform == "win32":  # pragma: no cover - platform specific
            import msvcrt

            return KeyEvent(msvcrt.getwch())
        return KeyEvent(self._read_cbreak())

    def drain(self) -> None:
        if not self._is_terminal():
            return
        if sys.platform == "win32":  # pragma: no cover - platform specific
            import msvcrt

            while msvcrt.kbhit():
                msvcrt.getwch()
            return
        import termios

        termios.tcflush(self._stream.fileno(), termios.TCIFLUSH)

    def _is_terminal(self) -> bool:
        try:
            return os.isatty(self._stream.fileno())
        except (AttributeError, OSError, ValueError):
            return False

    def _read_cbreak(self) -> str:
        import termios
        import tty

        fd = self._stream.fileno()
        previous = termios.tcgetattr(fd)
        try:
            tty.setcbreak(fd)
            data = os.read(fd, 32)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, previous)
        if not data:
            raise EOFError("input closed")
        return data.decode("utf-8", errors="replace")[:1]
