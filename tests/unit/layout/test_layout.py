"""Tests for wrap accounting, composed output, and the redraw sequence.

Wrap points are checked against an independent column simulation; the
renderer is driven with a fake terminal that records every write.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
import unittest
from pathlib import Path

from peek import ansi
from peek.config import BrowserOptions
from peek.cursor import CursorPosition
from peek.entries import DirectoryEntry, DirectoryListing, EntryKind
from peek.layout import (
    LayoutRenderer,
    compose,
    entry_width,
    overflow_lines,
    render_name,
    wrap_points,
)
from peek.state import DirectoryView
from peek.terminal import TerminalGeometry


def _entry(name: str, kind: EntryKind = EntryKind.REGULAR, color=None, indicator=None) -> DirectoryEntry:
    return DirectoryEntry(name=name, kind=kind, color=color, indicator=indicator)


def _simulate_breaks(widths: list[int], columns: int) -> list[int]:
    """Reference simulation: start a new row when the next entry would reach the edge."""
    rows: list[list[int]] = [[]]
    for idx, width in enumerate(widths):
        used = sum(widths[i] for i in rows[-1])
        if rows[-1] and used + width >= columns:
            rows.append([])
        rows[-1].append(idx)
    return [row[0] for row in rows[1:]]


class FakeTerminal:
    def __init__(self, positions: list[CursorPosition]) -> None:
        self.stdin_fd = 0
        self.writes: list[bytes] = []
        self.positions = list(positions)
        self.overflow_lines = 0
        self.clear_on_exit = False

    def write(self, data: bytes) -> None:
        self.writes.append(data)

    def query_position(self) -> CursorPosition:
        return self.positions.pop(0)

    def exit_raw_mode(self) -> None:
        pass

    @contextlib.contextmanager
    def raw_mode(self):
        yield self


class WrapAccountingTests(unittest.TestCase):
    def test_wrap_points_match_column_simulation(self) -> None:
        cases = [
            ([5, 5, 5, 5], 12),
            ([3, 9, 2, 7, 7, 1, 30, 4], 15),
            ([10, 10, 10], 10),
            ([1] * 40, 9),
            ([], 80),
        ]
        for widths, columns in cases:
            with self.subTest(widths=widths, columns=columns):
                self.assertEqual(wrap_points(widths, columns), _simulate_breaks(widths, columns))

    def test_last_column_is_never_filled(self) -> None:
        self.assertEqual(wrap_points([5, 5], 10), [1])
        self.assertEqual(wrap_points([4, 5], 10), [])

    def test_header_width_counts_toward_first_line(self) -> None:
        self.assertEqual(wrap_points([4, 4], 10, start=4), [1])
        self.assertEqual(wrap_points([4], 10, start=12), [0])

    def test_overflow_counts_rows_below_anchor(self) -> None:
        self.assertEqual(overflow_lines([7], 10), 0)
        self.assertEqual(overflow_lines([10], 10), 0)
        self.assertEqual(overflow_lines([25], 10), 2)
        self.assertEqual(overflow_lines([8, 8, 3], 10), 2)
        self.assertEqual(overflow_lines([4, 23, 5], 10), 1 + 3)


class EntryRenderingTests(unittest.TestCase):
    def test_entry_width_adds_indicator_and_delimiter(self) -> None:
        entry = _entry("abc", EntryKind.DIRECTORY, "34;1", "/")
        self.assertEqual(entry_width(entry, BrowserOptions()), 5)
        self.assertEqual(entry_width(entry, BrowserOptions(append_indicators=True)), 6)
        self.assertEqual(entry_width(_entry("abc"), BrowserOptions(append_indicators=True)), 5)

    def test_unprintable_characters_are_escaped_or_dropped(self) -> None:
        self.assertEqual(render_name("a\rb", hex_escape=True), (b"a/0D/b", 6))
        self.assertEqual(render_name("a\rb", hex_escape=False), (b"ab", 2))
        self.assertEqual(render_name("del\x7f", hex_escape=True), (b"del/7F/", 7))
        self.assertEqual(entry_width(_entry("a\rb"), BrowserOptions(hex_escape_unprintable=True)), 8)
        self.assertEqual(entry_width(_entry("a\rb"), BrowserOptions()), 4)

    def test_undecodable_bytes_escape_to_their_value(self) -> None:
        name = os.fsdecode(b"x\xffy")
        self.assertEqual(render_name(name, hex_escape=True), (b"x/FF/y", 6))

    def test_wide_characters_take_two_cells(self) -> None:
        self.assertEqual(render_name("日本", hex_escape=False), ("日本".encode("utf-8"), 4))


class ComposeTests(unittest.TestCase):
    def test_only_selected_entry_is_inverted(self) -> None:
        view = DirectoryView(path="/tmp", selected_index=1)
        listing = DirectoryListing(entries=(_entry("a"), _entry("b")))

        data, state = compose(view, listing, 80, BrowserOptions(use_color=False))

        self.assertEqual(
            data,
            ansi.SGR_RESET + b"a" + ansi.SGR_RESET + b"  " + ansi.SGR_INVERT + b"b" + ansi.SGR_RESET + b"  ",
        )
        self.assertEqual((state.printed_columns, state.wrapped_lines, state.overflow_lines), (6, 0, 0))

    def test_color_and_indicator_follow_options(self) -> None:
        view = DirectoryView(path="/tmp", selected_index=5)
        listing = DirectoryListing(entries=(_entry("src", EntryKind.DIRECTORY, "34;1", "/"),))

        colored, _ = compose(view, listing, 80, BrowserOptions(append_indicators=True))
        plain, _ = compose(view, listing, 80, BrowserOptions(use_color=False))

        self.assertEqual(colored, ansi.SGR_RESET + b"\x1b[34;1msrc" + ansi.SGR_RESET + b"/  ")
        self.assertEqual(plain, ansi.SGR_RESET + b"src" + ansi.SGR_RESET + b"  ")

    def test_markers_for_empty_and_unreadable_directories(self) -> None:
        view = DirectoryView(path="/tmp")
        empty, empty_state = compose(view, DirectoryListing(), 80, BrowserOptions())
        unreadable, _ = compose(view, DirectoryListing(readable=False), 80, BrowserOptions())

        self.assertEqual(empty, ansi.SGR_RESET + b"/empty/ " + ansi.SGR_RESET)
        self.assertEqual(empty_state.printed_columns, 8)
        self.assertEqual(unreadable, ansi.SGR_RESET + b"/could not scan/ " + ansi.SGR_RESET)

    def test_path_header_precedes_entries(self) -> None:
        view = DirectoryView(path="/srv")
        data, state = compose(view, DirectoryListing(entries=(_entry("x"),)), 80, BrowserOptions(show_path_header=True))

        self.assertTrue(data.startswith(ansi.SGR_BOLD + ansi.SGR_INVERT + b"/srv" + ansi.SGR_RESET + b": "))
        self.assertEqual(state.printed_columns, len("/srv: ") + 3)

    def test_line_breaks_and_overflow(self) -> None:
        view = DirectoryView(path="/tmp")
        listing = DirectoryListing(entries=tuple(_entry(name) for name in ("aaaa", "bbbb", "cccc")))

        data, state = compose(view, listing, 10, BrowserOptions(use_color=False))

        self.assertEqual(data.count(b"\n"), 2)
        self.assertEqual((state.printed_columns, state.wrapped_lines, state.overflow_lines), (6, 2, 2))

    def test_compose_is_deterministic(self) -> None:
        view = DirectoryView(path="/tmp", selected_index=2)
        listing = DirectoryListing(entries=tuple(_entry(f"entry-{i}") for i in range(12)))
        first = compose(view, listing, 33, BrowserOptions())
        second = compose(view, listing, 33, BrowserOptions())
        self.assertEqual(first, second)


class LayoutRendererTests(unittest.TestCase):
    def test_render_erases_draws_and_reanchors_after_overflow(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            for name in ("aaaa", "bbbb", "cccc"):
                (Path(tmp) / name).write_text("", encoding="utf-8")
            terminal = FakeTerminal([CursorPosition(24, 1), CursorPosition(24, 7)])
            renderer = LayoutRenderer(
                terminal,
                BrowserOptions(use_color=False),
                read_geometry=lambda: TerminalGeometry(columns=10, rows=24),
            )
            view = DirectoryView(path=tmp)

            state = renderer.render(view)

        self.assertEqual(terminal.writes[0], ansi.CURSOR_RESTORE + ansi.ERASE_BELOW + ansi.ERASE_LINE)
        self.assertIn(b"aaaa", terminal.writes[1])
        self.assertEqual(terminal.writes[2], b"\x1b[22;1f\x1b[s")
        self.assertEqual(state.overflow_lines, 2)
        self.assertEqual(renderer.overflow_lines, 2)
        self.assertEqual(view.selected_name, "aaaa")

    def test_render_without_overflow_keeps_anchor(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "one").write_text("", encoding="utf-8")
            terminal = FakeTerminal([CursorPosition(3, 1), CursorPosition(3, 6)])
            renderer = LayoutRenderer(
                terminal, BrowserOptions(), read_geometry=lambda: TerminalGeometry(columns=80, rows=24)
            )
            renderer.render(DirectoryView(path=tmp))

        self.assertEqual(len(terminal.writes), 2)
        self.assertEqual(terminal.overflow_lines, 0)

    def test_render_wraps_selection_and_clears_name_for_unreadable(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            for name in ("a", "b", "c"):
                (Path(tmp) / name).write_text("", encoding="utf-8")
            terminal = FakeTerminal([CursorPosition(1, 1)] * 6)
            renderer = LayoutRenderer(
                terminal, BrowserOptions(), read_geometry=lambda: TerminalGeometry(columns=80, rows=24)
            )
            view = DirectoryView(path=tmp, selected_index=3)
            renderer.render(view)
            self.assertEqual((view.selected_index, view.selected_name), (0, "a"))

            view.selected_index = -1
            renderer.render(view)
            self.assertEqual((view.selected_index, view.selected_name), (2, "c"))

            view.enter(os.path.join(tmp, "missing"))
            renderer.render(view)
            self.assertEqual((view.selected_index, view.selected_name), (0, ""))
            self.assertIn(b"/could not scan/", terminal.writes[-1])


if __name__ == "__main__":
    unittest.main()
