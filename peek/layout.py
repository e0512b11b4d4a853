"""Wrap-aware inline layout and redraw of a directory listing.

The renderer breaks lines itself before the terminal would wrap, keeping the
last column free so the terminal never sits in its deferred-wrap state. After
drawing it measures how many lines the block spans below the anchor and, when
the terminal scrolled, moves the saved anchor up so the next erase starts at
the top of the block again.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from . import ansi
from .config import BrowserOptions
from .entries import DirectoryEntry, DirectoryListing, list_directory
from .state import DirectoryView
from .terminal import TerminalGeometry, TerminalSession, geometry

ENTRY_DELIM = "  "
MSG_CANT_SCAN = "/could not scan/ "
MSG_EMPTY = "/empty/ "
HEADER_SUFFIX = ": "
HEX_TOKEN_WIDTH = 4


@dataclass(frozen=True)
class RenderState:
    """Column accounting for one render pass."""

    printed_columns: int
    wrapped_lines: int
    overflow_lines: int


def render_name(name: str, hex_escape: bool) -> tuple[bytes, int]:
    """Return the printable bytes of ``name`` and their cell width.

    Unprintable characters become ``/XX/`` tokens when ``hex_escape`` is set
    and are dropped otherwise.
    """
    out = bytearray()
    width = 0
    for ch in name:
        if ansi.is_unprintable(ch):
            if hex_escape:
                out += b"/%02X/" % ansi.raw_byte_value(ch)
                width += HEX_TOKEN_WIDTH
            continue
        out += ch.encode("utf-8")
        width += ansi.char_display_width(ch)
    return bytes(out), width


def entry_width(entry: DirectoryEntry, options: BrowserOptions) -> int:
    """Cells taken by ``entry``: name, optional indicator and delimiter."""
    _, width = render_name(entry.name, options.hex_escape_unprintable)
    if options.append_indicators and entry.indicator:
        width += 1
    return width + len(ENTRY_DELIM)


def wrap_points(widths: Sequence[int], columns: int, start: int = 0) -> list[int]:
    """Return indices of entries preceded by a forced line break.

    ``start`` is the width already printed on the first line. An entry moves
    to a new line when it would reach the last column and the current line is
    not empty. The last column stays blank: filling it leaves the terminal in
    its deferred-wrap state and the next byte would wrap a row that the
    overflow count never sees.
    """
    breaks: list[int] = []
    printed = start
    for idx, width in enumerate(widths):
        if printed > 0 and printed + width >= columns:
            breaks.append(idx)
            printed = 0
        printed += width
    return breaks


def overflow_lines(line_widths: Sequence[int], columns: int) -> int:
    """Count terminal rows the block extends below its first row.

    Each forced break advances one row per physical row its line occupied;
    the last line contributes only the rows it soft-wrapped onto.
    """
    if not line_widths:
        return 0
    rows = 0
    for width in line_widths[:-1]:
        rows += max(1, -(-width // columns))
    last = line_widths[-1]
    if last > 0:
        rows += (last - 1) // columns
    return rows


def compose(
    view: DirectoryView,
    listing: DirectoryListing,
    columns: int,
    options: BrowserOptions,
) -> tuple[bytes, RenderState]:
    """Lay out one pass of the listing; pure apart from reading ``view``."""
    out = bytearray()
    line_widths = [0]

    if options.show_path_header:
        name_bytes, width = render_name(view.path, options.hex_escape_unprintable)
        out += ansi.SGR_BOLD + ansi.SGR_INVERT + name_bytes + ansi.SGR_RESET
        out += HEADER_SUFFIX.encode("ascii")
        line_widths[-1] += width + len(HEADER_SUFFIX)

    out += ansi.SGR_RESET

    if not listing.readable:
        out += MSG_CANT_SCAN.encode("ascii") + ansi.SGR_RESET
        line_widths[-1] += len(MSG_CANT_SCAN)
    elif not listing.entries:
        out += MSG_EMPTY.encode("ascii") + ansi.SGR_RESET
        line_widths[-1] += len(MSG_EMPTY)

    widths = [entry_width(entry, options) for entry in listing.entries]
    breaks = set(wrap_points(widths, columns, start=line_widths[-1]))
    for idx, entry in enumerate(listing.entries):
        if idx in breaks:
            out += b"\n"
            line_widths.append(0)
        if idx == view.selected_index:
            out += ansi.SGR_INVERT
        if options.use_color and entry.color:
            out += ansi.sgr(entry.color)
        name_bytes, _ = render_name(entry.name, options.hex_escape_unprintable)
        out += name_bytes + ansi.SGR_RESET
        if options.append_indicators and entry.indicator:
            out += entry.indicator.encode("ascii")
        out += ENTRY_DELIM.encode("ascii")
        line_widths[-1] += widths[idx]

    state = RenderState(
        printed_columns=line_widths[-1],
        wrapped_lines=len(line_widths) - 1,
        overflow_lines=overflow_lines(line_widths, columns),
    )
    return bytes(out), state


class LayoutRenderer:
    """Erase the previous block and draw the current directory in its place."""

    def __init__(
        self,
        session: TerminalSession,
        options: BrowserOptions,
        read_geometry: Callable[[], TerminalGeometry] = geometry,
    ) -> None:
        self.session = session
        self.options = options
        self.read_geometry = read_geometry

    @property
    def overflow_lines(self) -> int:
        return self.session.overflow_lines

    def render(self, view: DirectoryView) -> RenderState:
        listing = list_directory(view.path, self.options.show_dotfiles)
        view.apply_listing(listing)
        columns = self.read_geometry().columns

        self.session.write(ansi.CURSOR_RESTORE + ansi.ERASE_BELOW + ansi.ERASE_LINE)
        anchor = self.session.query_position()

        data, state = compose(view, listing, columns, self.options)
        self.session.write(data)

        after = self.session.query_position()
        if state.overflow_lines:
            # The terminal may have scrolled; re-anchor at the block's top row.
            self.session.write(
                ansi.move_cursor(after.row - state.overflow_lines, anchor.column) + ansi.CURSOR_SAVE
            )
        self.session.overflow_lines = state.overflow_lines
        return state
