"""Overflow markers and the per-document set that owns them."""

from __future__ import annotations

import bisect
from typing import Optional, TYPE_CHECKING

from .constants import ColumnmarkConstants
from .model import Overlay

if TYPE_CHECKING:
    from .config import HighlightStyle
    from .model import Document


class Marker(Overlay):
    """The part of one line that lies beyond the column limit."""

    POSITION_FIELDS = ("line_start", "line_end", "overflow_start", "overflow_end")

    def __init__(self, line_start: int, line_end: int, overflow_start: int, overflow_end: int,
                 tag: str = ColumnmarkConstants.MARKER_TAG,
                 style: "Optional[HighlightStyle]" = None):
        self.line_start = line_start
        self.line_end = line_end
        self.overflow_start = overflow_start
        self.overflow_end = overflow_end
        self.tag = tag
        self.style = style

    # Overlay interface: the highlighted range is the overflow
    @property
    def start(self) -> int:
        return self.overflow_start

    @property
    def end(self) -> int:
        return self.overflow_end

    def key(self) -> tuple[int, int, int, int]:
        """Positional identity: (line_start, line_end, overflow_start, overflow_end)."""
        return (self.line_start, self.line_end, self.overflow_start, self.overflow_end)

    def __eq__(self, other):
        if not isinstance(other, Marker):
            return NotImplemented
        return self.key() == other.key() and self.tag == other.tag

    __hash__ = None  # mutable: offsets move with edits

    def __repr__(self) -> str:
        return (f"Marker(line={self.line_start}..{self.line_end}, "
                f"overflow={self.overflow_start}..{self.overflow_end})")


class MarkerSet:
    """All overflow markers of one document.

    Markers are stored as overlays on the document so they move with
    edits. The set also keeps its own list of them, ordered by position,
    so range lookups never walk the whole document. Overlays added by
    anything else are left alone.

    Edits shift every offset through the same non-decreasing mapping, so
    the list stays ordered without re-sorting.
    """

    def __init__(self, document: "Document", tag: str = ColumnmarkConstants.MARKER_TAG):
        self.document = document
        self.tag = tag
        self._markers: list[Marker] = []

    def add_marker(self, marker: Marker) -> None:
        """Attach `marker` to the document.

        Raises:
            ValueError: if the marker carries another set's tag
        """
        if marker.tag != self.tag:
            raise ValueError(f"Marker tag {marker.tag!r} does not belong to set {self.tag!r}")
        self.document.add_overlay(marker)
        bisect.insort(self._markers, marker, key=Marker.key)

    def _line_slice(self, line_start: int, line_end: int) -> tuple[int, int]:
        """Index range of the markers whose line touches [line_start, line_end]."""
        lo = bisect.bisect_left(self._markers, line_start, key=_line_end)
        hi = bisect.bisect_right(self._markers, line_end, lo=lo, key=_line_start)
        return lo, hi

    def _remove_slice(self, lo: int, hi: int) -> int:
        stale = self._markers[lo:hi]
        del self._markers[lo:hi]
        for marker in stale:
            self.document.remove_overlay(marker)
        return len(stale)

    def remove_markers_in_line_range(self, line_start: int, line_end: int) -> int:
        """Remove markers whose line touches [line_start, line_end].

        Returns:
            Number of markers removed
        """
        return self._remove_slice(*self._line_slice(line_start, line_end))

    def remove_all_markers(self) -> int:
        """Remove every marker of this set; return how many."""
        return self._remove_slice(0, len(self._markers))

    def markers_in_range(self, start: int, end: int) -> list[Marker]:
        """Markers whose overflow overlaps [start, end], ordered by position."""
        lo = bisect.bisect_left(self._markers, start, key=_overflow_end)
        hi = bisect.bisect_right(self._markers, end, lo=lo, key=_overflow_start)
        return self._markers[lo:hi]

    @property
    def markers(self) -> list[Marker]:
        """Copy of all markers, ordered by position."""
        return list(self._markers)

    def __len__(self) -> int:
        return len(self._markers)


def _line_start(marker: Marker) -> int:
    return marker.line_start


def _line_end(marker: Marker) -> int:
    return marker.line_end


def _overflow_start(marker: Marker) -> int:
    return marker.overflow_start


def _overflow_end(marker: Marker) -> int:
    return marker.overflow_end
