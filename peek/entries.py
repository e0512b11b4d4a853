"""Directory enumeration and per-entry classification.

Entries are rebuilt on every listing; nothing here is cached across renders.
Ordering is byte-wise on the filesystem encoding of each name, so uppercase
names sort before lowercase ones regardless of locale.
"""

from __future__ import annotations

import enum
import logging
import os
import stat
from dataclasses import dataclass

from .errors import PathTooLong
from .paths import resolve_path

logger = logging.getLogger(__name__)


class EntryKind(enum.Enum):
    UNKNOWN = "unknown"
    FIFO = "fifo"
    CHAR_DEVICE = "char-device"
    DIRECTORY = "directory"
    BLOCK_DEVICE = "block-device"
    REGULAR = "regular"
    SYMLINK = "symlink"
    SOCKET = "socket"


# SGR parameters and ls-style indicators for kinds the metadata settles.
KIND_STYLES: dict[EntryKind, tuple[str, str | None]] = {
    EntryKind.FIFO: ("33", None),
    EntryKind.CHAR_DEVICE: ("33;1", None),
    EntryKind.DIRECTORY: ("34;1", "/"),
    EntryKind.BLOCK_DEVICE: ("33;1", None),
    EntryKind.SYMLINK: ("36;1", "@"),
    EntryKind.SOCKET: ("35;1", "="),
}
EXECUTABLE_STYLE: tuple[str, str] = ("32;1", "*")


@dataclass(frozen=True)
class DirectoryEntry:
    """One visible directory child with its display class."""

    name: str
    kind: EntryKind
    color: str | None = None
    indicator: str | None = None


@dataclass(frozen=True)
class DirectoryListing:
    """Result of one enumeration; ``readable=False`` marks a failed scan."""

    entries: tuple[DirectoryEntry, ...] = ()
    readable: bool = True


def _kind_from_mode(mode: int) -> EntryKind:
    if stat.S_ISFIFO(mode):
        return EntryKind.FIFO
    if stat.S_ISCHR(mode):
        return EntryKind.CHAR_DEVICE
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat.S_ISBLK(mode):
        return EntryKind.BLOCK_DEVICE
    if stat.S_ISREG(mode):
        return EntryKind.REGULAR
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    if stat.S_ISSOCK(mode):
        return EntryKind.SOCKET
    return EntryKind.UNKNOWN


def entry_kind(dir_entry: os.DirEntry) -> EntryKind:
    """Return the kind of ``dir_entry`` without following symlinks."""
    try:
        if dir_entry.is_symlink():
            return EntryKind.SYMLINK
        if dir_entry.is_dir(follow_symlinks=False):
            return EntryKind.DIRECTORY
        if dir_entry.is_file(follow_symlinks=False):
            return EntryKind.REGULAR
        return _kind_from_mode(dir_entry.stat(follow_symlinks=False).st_mode)
    except OSError:
        return EntryKind.UNKNOWN


def classify(kind: EntryKind, directory: str, name: str) -> tuple[str | None, str | None]:
    """Return ``(color, indicator)`` for the entry ``name`` inside ``directory``.

    Regular and unknown entries fall back to an execute-permission probe; only
    they need the joined path. A path past the platform limit cannot be
    executed, so it probes as not executable.
    """
    style = KIND_STYLES.get(kind)
    if style is not None:
        return style
    try:
        full_path = resolve_path(directory, name)
    except PathTooLong as exc:
        logger.debug("skipping execute probe: %s", exc)
        return None, None
    if os.access(full_path, os.X_OK):
        return EXECUTABLE_STYLE
    return None, None


def is_visible(name: str, show_dotfiles: bool) -> bool:
    """Return whether ``name`` belongs in the listing."""
    if not name.startswith("."):
        return True
    if name in {".", ".."}:
        return False
    return show_dotfiles


def sort_key(name: str) -> bytes:
    return os.fsencode(name)


def list_directory(path: str, show_dotfiles: bool) -> DirectoryListing:
    """Enumerate, filter, sort and classify the children of ``path``."""
    try:
        with os.scandir(path) as children:
            found = [
                (child.name, entry_kind(child))
                for child in children
                if is_visible(child.name, show_dotfiles)
            ]
    except OSError as exc:
        logger.debug("could not scan %s: %s", path, exc)
        return DirectoryListing(readable=False)

    found.sort(key=lambda item: sort_key(item[0]))
    entries = []
    for name, kind in found:
        color, indicator = classify(kind, path, name)
        entries.append(DirectoryEntry(name=name, kind=kind, color=color, indicator=indicator))
    return DirectoryListing(entries=tuple(entries))
