"""Exception taxonomy for fatal browser conditions.

Every fatal condition derives from ``PeekError`` so the CLI can restore the
terminal, print one diagnostic line, and exit with status 1.
Unreadable and empty directories are not errors; they render in-band.
"""

from __future__ import annotations


class PeekError(Exception):
    """Base class for conditions that end the browsing session."""


class PathTooLong(PeekError):
    """A resolved path exceeds the platform path limit."""

    def __init__(self, path: str, limit: int) -> None:
        super().__init__(f"{path} is too long of a path!")
        self.path = path
        self.limit = limit


class DirectoryUnreachable(PeekError):
    """A directory could not be canonicalized or is not a directory."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Could not open {path}: {reason}")
        self.path = path
        self.reason = reason


class ProcessLaunchFailure(PeekError):
    """An external program could not be started."""

    def __init__(self, program: str, reason: str) -> None:
        super().__init__(f"{program} failed to execute: {reason}")
        self.program = program
        self.reason = reason


class TerminalClosed(PeekError):
    """Input ended while waiting for a terminal response."""
