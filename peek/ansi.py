"""ANSI control sequences and display-width helpers for inline rendering.

Sequences are kept as ``bytes`` because the renderer writes straight to the
stdout file descriptor. Width helpers count terminal cells, not characters.
"""

from __future__ import annotations

import unicodedata

SGR_RESET = b"\x1b[m"
SGR_BOLD = b"\x1b[1m"
SGR_INVERT = b"\x1b[7m"

CURSOR_HIDE = b"\x1b[?25l"
CURSOR_SHOW = b"\x1b[?25h"
CURSOR_SAVE = b"\x1b[s"
CURSOR_RESTORE = b"\x1b[u"
CURSOR_POSITION_QUERY = b"\x1b[6n"

# 0J erases below the cursor, 2K erases the whole cursor line.
ERASE_BELOW = b"\x1b[0J"
ERASE_LINE = b"\x1b[2K"


def sgr(params: str) -> bytes:
    """Return the SGR sequence for ``params`` such as ``"34;1"``."""
    return b"\x1b[" + params.encode("ascii") + b"m"


def move_cursor(row: int, column: int) -> bytes:
    """Return the absolute cursor-position sequence (1-based coordinates)."""
    return f"\x1b[{max(1, row)};{max(1, column)}f".encode("ascii")


def is_unprintable(ch: str) -> bool:
    """Return whether ``ch`` must be escaped or dropped instead of printed.

    C0 controls, DEL, and lone surrogates produced by ``surrogateescape`` for
    undecodable filename bytes are unprintable.
    """
    code = ord(ch)
    return code < 0x20 or code == 0x7F or 0xD800 <= code <= 0xDFFF


def raw_byte_value(ch: str) -> int:
    """Return the original byte of an unprintable character."""
    code = ord(ch)
    if 0xDC80 <= code <= 0xDCFF:
        return code - 0xDC00
    return code & 0xFF


def char_display_width(ch: str) -> int:
    """Return terminal column width for one printable character.

    Combining marks consume no columns, and East Asian wide/fullwidth
    characters consume two.
    """
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1

