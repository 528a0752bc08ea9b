"""Terminal rendering of documents with overflow highlighted, using Blessed."""

from __future__ import annotations

import sys
from typing import Optional, TextIO, TYPE_CHECKING

import blessed

from .config import HighlightStyle

if TYPE_CHECKING:
    from .markers import Marker, MarkerSet
    from .model import Document


class TerminalOverflowView:
    """Draws document lines, wrapping overflow ranges in their highlight style."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None,
                 default_style: Optional[HighlightStyle] = None):
        self.term = terminal or blessed.Terminal()
        self.default_style = default_style or HighlightStyle()

    def highlight(self, text: str, style: Optional[HighlightStyle] = None) -> str:
        """Return `text` wrapped in the terminal sequences for `style`."""
        if not text:
            return text
        style = style or self.default_style
        formatter = getattr(self.term, style.formatter_name())
        return formatter(text)

    def render_line(self, document: "Document", line_index: int,
                    markers: "list[Marker]") -> str:
        line_start, line_end = document.line_bounds(line_index)
        text = document.text
        out = []
        pos = line_start
        for marker in sorted(markers, key=lambda m: m.overflow_start):
            start = max(marker.overflow_start, pos)
            end = min(marker.overflow_end, line_end)
            if start >= end:
                continue
            out.append(text[pos:start])
            out.append(self.highlight(text[start:end], marker.style))
            pos = end
        out.append(text[pos:line_end])
        return ''.join(out)

    def render(self, document: "Document", marker_set: "MarkerSet",
               start: int = 0, end: Optional[int] = None) -> list[str]:
        """Render the lines touching [start, end].

        Announces the region to render listeners first so an enabled mode
        can bring its markers up to date.
        """
        if end is None:
            end = len(document)
        document.request_render(start, end)
        spans = list(document.iter_lines(start, end))
        # One lookup for the whole-line region, then grouped per line
        by_line: dict[int, list[Marker]] = {}
        for marker in marker_set.markers_in_range(spans[0][1], spans[-1][2]):
            by_line.setdefault(document.line_index_at(marker.line_start), []).append(marker)
        lines = []
        for line_index, _, _ in spans:
            lines.append(self.render_line(document, line_index, by_line.get(line_index, [])))
        return lines

    def draw(self, document: "Document", marker_set: "MarkerSet",
             stream: Optional[TextIO] = None) -> None:
        stream = stream or sys.stdout
        for line in self.render(document, marker_set):
            print(line, file=stream)


def report_lines(document: "Document", marker_set: "MarkerSet") -> list[str]:
    """One `name:line:column: message` diagnostic per marker.

    Columns are 1-based display columns.
    """
    label = document.filename or document.name
    lines = []
    for marker in marker_set.markers:
        line_number = document.line_index_at(marker.line_start) + 1
        column = document.column_at(marker.overflow_start)
        width = document.column_at(marker.line_end)
        lines.append(f"{label}:{line_number}:{column + 1}: line exceeds column limit ({width} columns)")
    return lines
