"""Column policy: decides the maximum allowed column for a line."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .constants import ColumnmarkConstants
from .errors import InvalidLimitError, PolicyResolutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineContext:
    """What a resolver may know about the line being checked.

    Attributes:
        line_number: 1-based line number
        line_start: Offset of the first character of the line
        line_end: Offset just past the last character (newline excluded)
        document_name: Display name of the document
        filename: Path of the document, if any
    """
    line_number: int
    line_start: int
    line_end: int
    document_name: str = "untitled"
    filename: Optional[str] = None


ColumnResolver = Callable[[LineContext], int]


def is_valid_limit(value) -> bool:
    """True for positive ints; bools are rejected even though they are ints."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= ColumnmarkConstants.MIN_COLUMN_LIMIT


def validate_limit(value) -> int:
    """Return `value` if it is a usable limit, else raise InvalidLimitError.

    Strings of digits are accepted so limits can come straight from a
    command line or prompt.
    """
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise InvalidLimitError(value) from None
    if not is_valid_limit(value):
        raise InvalidLimitError(value)
    return value


class ColumnPolicy:
    """Fixed limit, fallback width or resolver callback, in that order.

    A resolver overrides the fixed limit. If it raises or returns
    something other than a positive integer, the default limit is used.
    """

    def __init__(self, limit: Optional[int] = None, fallback: Optional[int] = None,
                 resolver: Optional[ColumnResolver] = None):
        self.limit = limit
        self.fallback = fallback
        self.resolver = resolver

    def _call_resolver(self, context: LineContext) -> int:
        assert self.resolver is not None
        try:
            value = self.resolver(context)
        except Exception as e:
            # Justification: a user-supplied resolver must never break scanning.
            raise PolicyResolutionError(f"Column resolver failed on line {context.line_number}: {e}") from e
        if not is_valid_limit(value):
            raise PolicyResolutionError(f"Column resolver returned {value!r} on line {context.line_number}")
        return value

    def resolve(self, context: LineContext) -> int:
        """Return the column limit for the line described by `context`."""
        if self.resolver is not None:
            try:
                return self._call_resolver(context)
            except PolicyResolutionError as e:
                logger.debug(f"{e}; using {ColumnmarkConstants.DEFAULT_COLUMN_LIMIT}")
                return ColumnmarkConstants.DEFAULT_COLUMN_LIMIT
        return self.static_limit

    @property
    def static_limit(self) -> int:
        """The limit that applies without a resolver."""
        for candidate in (self.limit, self.fallback):
            if is_valid_limit(candidate):
                return candidate
        return ColumnmarkConstants.DEFAULT_COLUMN_LIMIT

    def __repr__(self) -> str:
        return f"ColumnPolicy(limit={self.limit!r}, fallback={self.fallback!r}, resolver={self.resolver!r})"
