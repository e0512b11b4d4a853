"""Mutable browsing state owned by the navigation engine."""

from __future__ import annotations

from dataclasses import dataclass

from .entries import DirectoryListing


def clamp_selection(index: int, count: int) -> int:
    """Wrap ``index`` into ``[0, count)``; past either end lands on the other.

    With no entries the index is pinned to 0.
    """
    if count <= 0:
        return 0
    if index < 0:
        return count - 1
    if index >= count:
        return 0
    return index


@dataclass
class DirectoryView:
    path: str
    selected_index: int = 0
    selected_name: str = ""
    listing: DirectoryListing | None = None

    def apply_listing(self, listing: DirectoryListing) -> None:
        """Adopt a fresh listing, clamp the selection and record its name."""
        self.listing = listing
        self.selected_index = clamp_selection(self.selected_index, len(listing.entries))
        if listing.entries:
            self.selected_name = listing.entries[self.selected_index].name
        else:
            self.selected_name = ""

    def enter(self, path: str) -> None:
        """Switch to ``path`` with the selection reset to the first entry."""
        self.path = path
        self.selected_index = 0
        self.listing = None
