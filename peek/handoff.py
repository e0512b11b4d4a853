"""Hand the selected path to an external program.

Two shapes exist: replacing this process (editor, execute) and forking a
detached child (opener). Forked children are never awaited; the browser exits
right after spawning one, leaving it to be reparented.
"""

from __future__ import annotations

import logging
import os
import shlex
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from .errors import ProcessLaunchFailure

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vim"


@dataclass(frozen=True)
class HandoffRequest:
    """What to launch: ``program`` with ``path`` appended, or ``path`` itself."""

    program: tuple[str, ...] | None
    path: str
    fork: bool = False

    @property
    def argv(self) -> list[str]:
        if self.program is None:
            return [self.path]
        return [*self.program, self.path]


def editor_command(configured: str | None, environ: Mapping[str, str] = os.environ) -> tuple[str, ...]:
    """Resolve the editor from config, ``$VISUAL``, ``$EDITOR`` or ``vim``."""
    for candidate in (configured, environ.get("VISUAL"), environ.get("EDITOR")):
        if candidate and candidate.strip():
            parts = shlex.split(candidate)
            if parts:
                return tuple(parts)
    return (DEFAULT_EDITOR,)


def opener_command(configured: str | None, platform: str = sys.platform) -> tuple[str, ...]:
    """Resolve the opener from config, else ``open`` on macOS or ``xdg-open``."""
    if configured and configured.strip():
        parts = shlex.split(configured)
        if parts:
            return tuple(parts)
    return ("open",) if platform == "darwin" else ("xdg-open",)


def replace_process(argv: list[str], before_exec: Callable[[], None]) -> None:
    """Replace the current process with ``argv``; returns only by raising.

    ``before_exec`` runs first because no cleanup handler survives ``exec``.
    """
    before_exec()
    logger.debug("exec %s", argv)
    try:
        os.execvp(argv[0], argv)
    except OSError as exc:
        raise ProcessLaunchFailure(argv[0], exc.strerror or str(exc)) from exc


def spawn_detached(argv: list[str]) -> int:
    """Fork a child that execs ``argv``; the parent returns the child pid."""
    try:
        pid = os.fork()
    except OSError as exc:
        raise ProcessLaunchFailure(argv[0], f"could not start process: {exc.strerror or exc}") from exc

    if pid == 0:
        try:
            os.execvp(argv[0], argv)
        except OSError as exc:
            os.write(2, f"\n{argv[0]} failed to execute: {exc.strerror or exc}\n".encode(errors="replace"))
        os._exit(1)

    logger.debug("spawned %s as pid %d", argv, pid)
    return pid

