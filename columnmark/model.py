"""Document model used as the host for overflow highlighting.

A `Document` owns the text, knows where its lines start, computes display
columns, stores overlays (tagged highlight annotations) and notifies
listeners when text changes or a region is about to be drawn.
"""

from __future__ import annotations

import bisect
import logging
import os
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_for_filename, guess_lexer
from pygments.token import Token
from pygments.util import ClassNotFound
from wcwidth import wcwidth

from .constants import ColumnmarkConstants
from .errors import ClassificationUnavailable

logger = logging.getLogger(__name__)

RangeListener = Callable[[int, int], None]


def char_width(char: str, column: int, tab_width: int = ColumnmarkConstants.TAB_WIDTH) -> int:
    """Return how many display columns `char` occupies when drawn at `column`.

    Tabs advance to the next tab stop, wide glyphs take two columns,
    combining marks take none and control characters are drawn in caret
    notation.
    """
    if char == "\t":
        return tab_width - (column % tab_width)
    width = wcwidth(char)
    if width < 0:
        return ColumnmarkConstants.CONTROL_CHAR_WIDTH
    return width


def string_width(text: str, start_column: int = 0,
                 tab_width: int = ColumnmarkConstants.TAB_WIDTH) -> int:
    """Return the display width of `text` drawn from `start_column`."""
    column = start_column
    for char in text:
        column += char_width(char, column, tab_width)
    return column - start_column


def _adjust_position(pos: int, start: int, old_end: int, new_end: int) -> int:
    if pos <= start:
        return pos
    if pos >= old_end:
        return pos + (new_end - old_end)
    # Inside the replaced text
    return start


class Overlay:
    """A tagged annotation over a range of a document.

    Subclasses list every offset attribute in POSITION_FIELDS so the
    document can keep them in place while text is edited around them.
    """

    POSITION_FIELDS: tuple[str, ...] = ("start", "end")
    start: int
    end: int
    tag: str

    def adjust_for_edit(self, start: int, old_end: int, new_end: int) -> None:
        for name in self.POSITION_FIELDS:
            setattr(self, name, _adjust_position(getattr(self, name), start, old_end, new_end))

    def overlaps(self, start: int, end: int) -> bool:
        return self.start <= end and self.end >= start


class Highlight(Overlay):
    """A plain overlay, e.g. a search match or a selection."""

    def __init__(self, start: int, end: int, tag: str = "", face: str = "default"):
        self.start = start
        self.end = end
        self.tag = tag
        self.face = face

    def __repr__(self) -> str:
        return f"Highlight({self.start}, {self.end}, tag={self.tag!r}, face={self.face!r})"


class Document:
    """Text buffer with line, column, overlay and classification services."""

    def __init__(self, text: str = "", name: Optional[str] = None,
                 filename: Optional[str] = None, content_type: Optional[str] = None,
                 tab_width: int = ColumnmarkConstants.TAB_WIDTH):
        self._text = text
        self.filename = filename
        self.name = name or (os.path.basename(filename) if filename else "untitled")
        self.tab_width = tab_width
        # Explicit category or pygments alias; detected when None
        self.content_type = content_type
        # Per-document variables, e.g. the mode controller
        self.local_variables: dict[str, Any] = {}
        # Keyed by id(); removal is by identity
        self._overlays: dict[int, Overlay] = {}
        self._change_listeners: list[RangeListener] = []
        self._render_listeners: list[RangeListener] = []
        self._line_starts = self._compute_line_starts(text)
        self._lexer: Optional[Lexer] = None
        self._comment_spans: Optional[list[tuple[int, int]]] = None

    @classmethod
    def from_file(cls, path: str, content_type: Optional[str] = None) -> "Document":
        """Load a document from disk, decoding as UTF-8."""
        text = Path(path).read_text(encoding="utf-8")
        return cls(text, filename=path, content_type=content_type)

    @staticmethod
    def _compute_line_starts(text: str) -> list[int]:
        starts = [0]
        pos = text.find("\n")
        while pos != -1:
            starts.append(pos + 1)
            pos = text.find("\n", pos + 1)
        return starts

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    # --- Lines and columns ---

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_index_at(self, offset: int) -> int:
        """Return the 0-based index of the line containing `offset`."""
        offset = max(0, min(offset, len(self._text)))
        return bisect.bisect_right(self._line_starts, offset) - 1

    def line_bounds(self, line_index: int) -> tuple[int, int]:
        """Return (start, end) of a line; end excludes the newline."""
        start = self._line_starts[line_index]
        if line_index + 1 < len(self._line_starts):
            end = self._line_starts[line_index + 1] - 1
        else:
            end = len(self._text)
        return start, end

    def line_text(self, line_index: int) -> str:
        start, end = self.line_bounds(line_index)
        return self._text[start:end]

    def iter_lines(self, start: int = 0, end: Optional[int] = None) -> Iterator[tuple[int, int, int]]:
        """Yield (line_index, line_start, line_end) for lines touching [start, end].

        A range that cuts through a line still yields that whole line.
        """
        if end is None:
            end = len(self._text)
        first = self.line_index_at(min(start, end))
        last = self.line_index_at(max(start, end))
        for index in range(first, last + 1):
            line_start, line_end = self.line_bounds(index)
            yield index, line_start, line_end

    def column_at(self, offset: int) -> int:
        """Return the display column of `offset` within its line."""
        line_start, _ = self.line_bounds(self.line_index_at(offset))
        return string_width(self._text[line_start:offset], tab_width=self.tab_width)

    def move_to_column(self, line_start: int, line_end: int, column: int) -> int:
        """Return the first offset on the line at or past display `column`.

        When a character straddles `column` the result is the offset just
        after it. If the line is shorter than `column`, returns `line_end`.
        """
        pos = line_start
        current = 0
        while pos < line_end and current < column:
            current += char_width(self._text[pos], current, self.tab_width)
            pos += 1
        return pos

    # --- Editing ---

    def insert(self, offset: int, text: str) -> None:
        self.replace(offset, offset, text)

    def delete(self, start: int, end: int) -> None:
        self.replace(start, end, "")

    def replace(self, start: int, end: int, text: str) -> None:
        """Replace [start, end) with `text` and notify change listeners."""
        if not 0 <= start <= end <= len(self._text):
            raise IndexError(f"Range {start}..{end} outside document of length {len(self._text)}")
        self._text = self._text[:start] + text + self._text[end:]
        self._line_starts = self._compute_line_starts(self._text)
        self._comment_spans = None
        new_end = start + len(text)
        for overlay in self._overlays.values():
            overlay.adjust_for_edit(start, end, new_end)
        for listener in list(self._change_listeners):
            listener(start, new_end)

    # --- Listeners ---

    def add_change_listener(self, listener: RangeListener) -> None:
        if listener not in self._change_listeners:
            self._change_listeners.append(listener)

    def remove_change_listener(self, listener: RangeListener) -> None:
        if listener in self._change_listeners:
            self._change_listeners.remove(listener)

    def add_render_listener(self, listener: RangeListener) -> None:
        if listener not in self._render_listeners:
            self._render_listeners.append(listener)

    def remove_render_listener(self, listener: RangeListener) -> None:
        if listener in self._render_listeners:
            self._render_listeners.remove(listener)

    def request_render(self, start: int = 0, end: Optional[int] = None) -> None:
        """Announce that [start, end] is about to be drawn."""
        if end is None:
            end = len(self._text)
        for listener in list(self._render_listeners):
            listener(start, end)

    # --- Overlays ---

    @property
    def overlays(self) -> list[Overlay]:
        return list(self._overlays.values())

    def add_overlay(self, overlay: Overlay) -> None:
        self._overlays[id(overlay)] = overlay

    def remove_overlay(self, overlay: Overlay) -> None:
        # By identity: markers compare equal by position
        if self._overlays.pop(id(overlay), None) is None:
            raise ValueError(f"{overlay!r} is not in this document")

    # --- Classification ---

    @property
    def lexer(self) -> Lexer:
        """Pygments lexer for this document: by filename, then content, then plain text."""
        if self._lexer is None:
            self._lexer = self._determine_lexer()
        return self._lexer

    def _determine_lexer(self) -> Lexer:
        if self.filename:
            try:
                lexer = get_lexer_for_filename(self.filename)
                logger.debug(f"Detected lexer {lexer.name!r} for {self.filename} by filename")
                return lexer
            except ClassNotFound:
                logger.debug(f"No lexer for filename {self.filename}")
        sample = self._text[:ColumnmarkConstants.GUESS_SAMPLE_CHARS]
        if sample.strip():
            try:
                lexer = guess_lexer(sample)
                logger.debug(f"Guessed lexer {lexer.name!r} for {self.name}")
                return lexer
            except ClassNotFound:
                logger.debug(f"Content guess failed for {self.name}")
        return TextLexer()

    @property
    def content_category(self) -> str:
        """Either "programming" or "text"."""
        content_type = self.content_type
        if content_type in (ColumnmarkConstants.CATEGORY_PROGRAMMING, ColumnmarkConstants.CATEGORY_TEXT):
            return content_type
        if content_type is not None:
            aliases = {content_type.lower()}
        else:
            lexer = self.lexer
            if isinstance(lexer, TextLexer):
                return ColumnmarkConstants.CATEGORY_TEXT
            aliases = {alias.lower() for alias in lexer.aliases}
        if aliases & ColumnmarkConstants.PROSE_LEXER_ALIASES:
            return ColumnmarkConstants.CATEGORY_TEXT
        return ColumnmarkConstants.CATEGORY_PROGRAMMING

    def _build_comment_spans(self) -> list[tuple[int, int]]:
        spans: list[tuple[int, int]] = []
        try:
            for index, token_type, value in self.lexer.get_tokens_unprocessed(self._text):
                if value and token_type in Token.Comment:
                    if spans and spans[-1][1] == index:
                        spans[-1] = (spans[-1][0], index + len(value))
                    else:
                        spans.append((index, index + len(value)))
        except Exception as e:
            # Justification: third-party lexers may fail on arbitrary input;
            # callers decide how to degrade.
            raise ClassificationUnavailable(f"Could not tokenize {self.name}: {e}") from e
        return spans

    def is_in_comment(self, offset: int) -> bool:
        """Return True if the character at `offset` belongs to a comment token.

        Raises ClassificationUnavailable when the text cannot be tokenized.
        """
        if self._comment_spans is None:
            self._comment_spans = self._build_comment_spans()
        spans = self._comment_spans
        i = bisect.bisect_right(spans, (offset, float("inf"))) - 1
        return i >= 0 and spans[i][0] <= offset < spans[i][1]
