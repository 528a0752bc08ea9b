"""Scanner: finds the part of each line that runs past the column limit."""

from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

from .errors import ClassificationUnavailable
from .markers import Marker, MarkerSet
from .policy import ColumnPolicy, LineContext

if TYPE_CHECKING:
    from .config import HighlightStyle
    from .model import Document

logger = logging.getLogger(__name__)


class Scanner:
    """Rescans line ranges and replaces their overflow markers.

    Scanning is idempotent: the same range may be scanned any number of
    times (it is, once per edit and once per render) and every line ends
    up with at most one marker.
    """

    def __init__(self, marker_set: MarkerSet, policy: ColumnPolicy,
                 include_comments: bool = True, style: "Optional[HighlightStyle]" = None):
        self.marker_set = marker_set
        self.policy = policy
        self.include_comments = include_comments
        self.style = style

    def _in_comment(self, document: "Document", offset: int) -> bool:
        try:
            return document.is_in_comment(offset)
        except ClassificationUnavailable as e:
            logger.debug(f"{e}; treating offset {offset} as code")
            return False

    def scan_line(self, document: "Document", line_index: int,
                  line_start: int, line_end: int) -> Optional[Marker]:
        """Replace the marker of one line; return the new marker, if any."""
        self.marker_set.remove_markers_in_line_range(line_start, line_end)
        context = LineContext(
            line_number=line_index + 1,
            line_start=line_start,
            line_end=line_end,
            document_name=document.name,
            filename=document.filename,
        )
        limit = self.policy.resolve(context)
        overflow_start = document.move_to_column(line_start, line_end, limit)
        if overflow_start >= line_end:
            return None
        if not self.include_comments and self._in_comment(document, overflow_start):
            return None
        marker = Marker(line_start, line_end, overflow_start, line_end,
                        tag=self.marker_set.tag, style=self.style)
        self.marker_set.add_marker(marker)
        return marker

    def scan(self, document: "Document", range_start: int = 0,
             range_end: Optional[int] = None) -> list[Marker]:
        """Rescan every line touching [range_start, range_end]."""
        if range_end is None:
            range_end = len(document)
        found = []
        for line_index, line_start, line_end in document.iter_lines(range_start, range_end):
            marker = self.scan_line(document, line_index, line_start, line_end)
            if marker is not None:
                found.append(marker)
        return found
