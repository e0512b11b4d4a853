"""Terminal session lifecycle for inline rendering.

Owns raw-mode entry/exit, cursor visibility, and the saved-position anchor.
Restoration runs on every exit path: normal quit, fatal errors, signals and
interpreter shutdown all funnel into ``exit_raw_mode``.
"""

from __future__ import annotations

import atexit
import contextlib
import os
import shutil
import signal
import termios
from dataclasses import dataclass

from . import ansi
from .cursor import CursorPosition, query_cursor_position

_LFLAG = 3
_CC = 6
_CLEANUP_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


@dataclass(frozen=True)
class TerminalGeometry:
    columns: int
    rows: int


def geometry() -> TerminalGeometry:
    """Read the current terminal size, defaulting to 80x24."""
    size = shutil.get_terminal_size((80, 24))
    return TerminalGeometry(columns=max(1, size.columns), rows=max(1, size.lines))


def _raise_system_exit(signum, _frame) -> None:
    raise SystemExit(1)


class TerminalSession:
    """Manage terminal attributes and cursor state for one browsing session."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind stdin/stdout file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._raw = False
        self.overflow_lines = 0
        self.clear_on_exit = False

    def write(self, data: bytes) -> None:
        os.write(self.stdout_fd, data)

    def hide_cursor(self) -> None:
        self.write(ansi.CURSOR_HIDE)

    def show_cursor(self) -> None:
        self.write(ansi.CURSOR_SHOW)

    def save_position(self) -> None:
        self.write(ansi.CURSOR_SAVE)

    def restore_position(self) -> None:
        self.write(ansi.CURSOR_RESTORE)

    def query_position(self) -> CursorPosition:
        return query_cursor_position(self.stdin_fd, self.stdout_fd)

    def enter_raw_mode(self) -> None:
        """Disable canonical input and echo, then anchor the display."""
        raw = termios.tcgetattr(self.stdin_fd)
        raw[_LFLAG] &= ~(termios.ICANON | termios.ECHO)
        raw[_CC] = list(raw[_CC])
        raw[_CC][termios.VMIN] = 0
        raw[_CC][termios.VTIME] = 0
        termios.tcsetattr(self.stdin_fd, termios.TCSANOW, raw)
        self._raw = True
        self.write(ansi.CURSOR_HIDE + ansi.CURSOR_SAVE)

    def exit_raw_mode(self) -> None:
        """Show the cursor, clear or step past the display, restore attributes.

        Without ``clear_on_exit`` the cursor moves ``overflow_lines + 1``
        lines down so the shell prompt lands below the last listing. A second
        call is a no-op.
        """
        if not self._raw:
            return
        self._raw = False
        out = ansi.CURSOR_SHOW
        if self.clear_on_exit:
            out += ansi.CURSOR_RESTORE + ansi.ERASE_BELOW + ansi.ERASE_LINE
        else:
            out += b"\n" * (self.overflow_lines + 1)
        try:
            self.write(out)
        finally:
            termios.tcsetattr(self.stdin_fd, termios.TCSANOW, self._saved_tty_state)

    @contextlib.contextmanager
    def raw_mode(self):
        """Bracket code with raw mode, restoring on every exit path."""
        previous = {signum: signal.getsignal(signum) for signum in _CLEANUP_SIGNALS}
        for signum in _CLEANUP_SIGNALS:
            signal.signal(signum, _raise_system_exit)
        atexit.register(self.exit_raw_mode)
        try:
            self.enter_raw_mode()
            yield self
        finally:
            try:
                self.exit_raw_mode()
            finally:
                atexit.unregister(self.exit_raw_mode)
                for signum, handler in previous.items():
                    signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
