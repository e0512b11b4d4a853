"""Cursor-position query and response parsing.

The terminal answers ``ESC [ 6 n`` with ``ESC [ <row> ; <col> R``. Other
bytes (stray keystrokes, partial sequences) may arrive around the answer, so
the parser resynchronizes on anything that breaks the grammar instead of
failing. Queries block until a full answer arrives; there is no timeout.
"""

from __future__ import annotations

import enum
import logging
import os
import select
import termios
from dataclasses import dataclass

from .ansi import CURSOR_POSITION_QUERY
from .errors import TerminalClosed

logger = logging.getLogger(__name__)

_ESC = 0x1B
_BRACKET = ord("[")
_SEMICOLON = ord(";")
_TERMINATOR = ord("R")
_DIGITS = range(ord("0"), ord("9") + 1)


@dataclass(frozen=True)
class CursorPosition:
    """1-based cursor coordinates as reported by the terminal."""

    row: int
    column: int


class ParserState(enum.Enum):
    SEEK_ESCAPE = "seek-escape"
    SEEK_BRACKET = "seek-bracket"
    ROW_DIGITS = "row-digits"
    COL_DIGITS = "col-digits"


class CursorResponseParser:
    """Incremental state machine for cursor-position responses."""

    def __init__(self) -> None:
        self.state = ParserState.SEEK_ESCAPE
        self._row: list[int] = []
        self._col: list[int] = []

    def reset(self) -> None:
        self.state = ParserState.SEEK_ESCAPE
        self._row.clear()
        self._col.clear()

    def _resync(self, byte: int) -> None:
        if self.state is not ParserState.SEEK_ESCAPE:
            logger.debug("cursor response resync on byte 0x%02X in %s", byte, self.state.value)
        self.reset()
        # A breaking ESC may begin the real response.
        if byte == _ESC:
            self.state = ParserState.SEEK_BRACKET

    def feed(self, byte: int) -> CursorPosition | None:
        """Consume one byte; return the position once a response completes."""
        state = self.state
        if state is ParserState.SEEK_ESCAPE:
            if byte == _ESC:
                self.state = ParserState.SEEK_BRACKET
            return None

        if state is ParserState.SEEK_BRACKET:
            if byte == _BRACKET:
                self.state = ParserState.ROW_DIGITS
            else:
                self._resync(byte)
            return None

        if state is ParserState.ROW_DIGITS:
            if byte in _DIGITS:
                self._row.append(byte - ord("0"))
            elif byte == _SEMICOLON and self._row:
                self.state = ParserState.COL_DIGITS
            else:
                self._resync(byte)
            return None

        if byte in _DIGITS:
            self._col.append(byte - ord("0"))
            return None
        if byte == _TERMINATOR and self._col:
            position = CursorPosition(row=_to_int(self._row), column=_to_int(self._col))
            self.reset()
            return position
        self._resync(byte)
        return None

    def parse(self, data: bytes) -> CursorPosition | None:
        """Feed ``data`` and return the first complete position, if any."""
        for byte in data:
            position = self.feed(byte)
            if position is not None:
                return position
        return None


def _to_int(digits: list[int]) -> int:
    value = 0
    for digit in digits:
        value = value * 10 + digit
    return value


def discard_pending_input(fd: int) -> None:
    """Drop bytes already queued on ``fd`` (best-effort)."""
    try:
        termios.tcflush(fd, termios.TCIFLUSH)
    except termios.error:
        pass


def _read_byte(fd: int) -> int:
    select.select([fd], [], [])
    data = os.read(fd, 1)
    if not data:
        raise TerminalClosed("input closed while waiting for cursor position")
    return data[0]


def query_cursor_position(stdin_fd: int, stdout_fd: int) -> CursorPosition:
    """Ask the terminal where the cursor is and block until it answers."""
    discard_pending_input(stdin_fd)
    os.write(stdout_fd, CURSOR_POSITION_QUERY)
    parser = CursorResponseParser()
    while True:
        position = parser.feed(_read_byte(stdin_fd))
        if position is not None:
            return position
