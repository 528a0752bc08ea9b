"""User-facing configuration for overflow highlighting.

Settings are plain dataclasses. `OverflowSettings.from_mapping` builds
them from the dictionaries stored by `settings_persistence`, keeping
defaults for anything missing or invalid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from .constants import ColumnmarkConstants
from .policy import ColumnPolicy, ColumnResolver, is_valid_limit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HighlightStyle:
    """Visual style of overflow markers.

    Attributes:
        inherit: Name of a face in ColumnmarkConstants.FACES to start from
        underline: Whether to underline the overflowing text
        foreground: Optional color overriding the inherited foreground
        background: Optional background color
    """
    inherit: Optional[str] = "warning"
    underline: bool = True
    foreground: Optional[str] = None
    background: Optional[str] = None

    def formatter_name(self) -> str:
        """Compound blessed formatter name, e.g. "underline_bold_yellow"."""
        parts: list[str] = []
        if self.underline:
            parts.append("underline")
        face = ColumnmarkConstants.FACES.get(self.inherit or "default", "normal")
        if self.foreground:
            # An explicit color replaces the face color but keeps its attributes
            face_parts = [p for p in face.split("_") if p in ("bold", "italic", "reverse")]
            parts.extend(face_parts)
            parts.append(self.foreground)
        elif face != "normal":
            parts.append(face)
        if self.background:
            parts.append(f"on_{self.background}")
        return "_".join(parts) or "normal"

    def to_dict(self) -> dict[str, Any]:
        return {
            "inherit": self.inherit,
            "underline": self.underline,
            "foreground": self.foreground,
            "background": self.background,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HighlightStyle":
        style = cls()
        inherit = data.get("inherit", style.inherit)
        if inherit is not None and inherit not in ColumnmarkConstants.FACES:
            logger.warning(f"Unknown face {inherit!r}, using {style.inherit!r}")
            inherit = style.inherit
        return cls(
            inherit=inherit,
            underline=bool(data.get("underline", style.underline)),
            foreground=data.get("foreground") or None,
            background=data.get("background") or None,
        )


@dataclass(frozen=True)
class OverflowSettings:
    """Everything that shapes overflow scanning for one document."""
    column_limit: Optional[int] = ColumnmarkConstants.DEFAULT_COLUMN_LIMIT
    fallback_column: Optional[int] = None
    include_comments: bool = True
    column_limit_resolver: Optional[ColumnResolver] = field(default=None, compare=False)
    highlight_style: HighlightStyle = field(default_factory=HighlightStyle)

    def make_policy(self) -> ColumnPolicy:
        return ColumnPolicy(
            limit=self.column_limit,
            fallback=self.fallback_column,
            resolver=self.column_limit_resolver,
        )

    def with_limit(self, limit: int) -> "OverflowSettings":
        return replace(self, column_limit=limit)

    def to_dict(self) -> dict[str, Any]:
        """Serializable subset; resolvers are code and are not persisted."""
        return {
            "column_limit": self.column_limit,
            "include_comments": self.include_comments,
            "highlight_style": self.highlight_style.to_dict(),
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any],
                     base: Optional["OverflowSettings"] = None) -> "OverflowSettings":
        """Overlay persisted values on `base`, skipping invalid entries."""
        settings = base or cls()
        limit = data.get("column_limit")
        if limit is not None:
            if is_valid_limit(limit):
                settings = replace(settings, column_limit=limit)
            else:
                logger.warning(f"Ignoring invalid column_limit {limit!r}")
        include_comments = data.get("include_comments")
        if include_comments is not None:
            if isinstance(include_comments, bool):
                settings = replace(settings, include_comments=include_comments)
            else:
                logger.warning(f"Ignoring invalid include_comments {include_comments!r}")
        style = data.get("highlight_style")
        if isinstance(style, Mapping):
            settings = replace(settings, highlight_style=HighlightStyle.from_dict(style))
        return settings
