"""Path joining and canonicalization for the browsed directory.

Paths are plain ``str`` values so undecodable bytes carried through
``surrogateescape`` survive joins. Canonicalization always produces a fresh
string; callers commit it only after it succeeds.
"""

from __future__ import annotations

import logging
import os

from .errors import DirectoryUnreachable, PathTooLong

logger = logging.getLogger(__name__)

SEPARATOR = "/"
FALLBACK_PATH_MAX = 4096


def path_limit() -> int:
    """Return the platform path limit in bytes, including the terminator."""
    try:
        limit = os.pathconf(SEPARATOR, "PC_PATH_MAX")
    except (OSError, ValueError):
        return FALLBACK_PATH_MAX
    return limit if limit > 0 else FALLBACK_PATH_MAX


def _check_length(path: str) -> str:
    limit = path_limit()
    if len(os.fsencode(path)) + 1 > limit:
        raise PathTooLong(path, limit)
    return path


def resolve_path(current: str, suffix: str) -> str:
    """Join ``suffix`` onto ``current`` with a single separator.

    An absolute ``suffix`` replaces ``current`` entirely and an empty one
    leaves it unchanged. Raises ``PathTooLong`` past the platform limit.
    """
    if suffix.startswith(SEPARATOR):
        return _check_length(suffix)
    if not suffix:
        return _check_length(current)
    if current.endswith(SEPARATOR):
        return _check_length(current + suffix)
    return _check_length(current + SEPARATOR + suffix)


def change_directory(current: str | None, requested: str) -> str:
    """Return the canonical absolute path of ``requested``.

    ``current`` is ``None`` only at startup, when ``requested`` is taken
    relative to the process working directory. ``.``, ``..`` and symlinks are
    resolved. Raises ``DirectoryUnreachable`` when the target does not exist
    or is not a directory; ``current`` is never modified.
    """
    if current is None:
        target = _check_length(os.path.abspath(requested))
    else:
        target = resolve_path(current, requested)

    try:
        canonical = os.path.realpath(target, strict=True)
    except OSError as exc:
        raise DirectoryUnreachable(target, exc.strerror or str(exc)) from exc
    if not os.path.isdir(canonical):
        raise DirectoryUnreachable(canonical, "Not a directory")

    logger.debug("changed directory to %s", canonical)
    return _check_length(canonical)
