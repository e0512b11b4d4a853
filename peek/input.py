"""Low-level keystroke decoding.

Reads raw bytes from stdin and translates them into key tokens. Arrow keys
arrive as ``ESC [ A-D``; an ESC with no ``[`` right behind it is a bare
Escape press.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25

ESC = "ESC"
EOF = "EOF"
ENTER = "ENTER"
UP = "UP"
DOWN = "DOWN"
RIGHT = "RIGHT"
LEFT = "LEFT"
UNKNOWN_SEQUENCE = "ESC_SEQUENCE"

_ARROWS = {b"A": UP, b"B": DOWN, b"C": RIGHT, b"D": LEFT}


def _read_ready_byte(fd: int, timeout_ms: int | None) -> bytes | None:
    timeout = None if timeout_ms is None else max(0.0, timeout_ms / 1000.0)
    ready, _, _ = select.select([fd], [], [], timeout)
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def read_key(fd: int) -> str:
    """Block until one key arrives and return its token.

    Returns ``EOF`` when input is exhausted.
    """
    ch = _read_ready_byte(fd, None)
    if ch is None:
        return EOF
    if ch in {b"\n", b"\r"}:
        return ENTER
    if ch != b"\x1b":
        return ch.decode("utf-8", errors="replace")

    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq != b"[":
        return ESC
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return UNKNOWN_SEQUENCE
    return _ARROWS.get(seq, UNKNOWN_SEQUENCE)
