"""Mode controllers: per-document and global on/off switches."""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Optional, TYPE_CHECKING

from .config import OverflowSettings
from .constants import ColumnmarkConstants
from .markers import Marker, MarkerSet
from .policy import ColumnResolver, validate_limit
from .scanner import Scanner
from .session import SessionKeys, get_session

if TYPE_CHECKING:
    from .model import Document
    from .workspace import Workspace

logger = logging.getLogger(__name__)

# Key under which a document stores its controller
LOCAL_VARIABLE = "columnmark-mode"


class ModeState(Enum):
    DISABLED = "disabled"
    ENABLED = "enabled"


class ModeController:
    """Turns overflow highlighting on and off for one document.

    While enabled the scanner is registered twice: for edits (scoped to
    the edited range) and for render requests (the region about to be
    drawn). The second registration repairs markers if an edit
    notification was ever missed; scanning twice is harmless.
    """

    def __init__(self, document: "Document", settings: Optional[OverflowSettings] = None):
        if LOCAL_VARIABLE in document.local_variables:
            raise ValueError(f"{document.name} already has a mode controller")
        self.document = document
        self.settings = settings or OverflowSettings()
        self.state = ModeState.DISABLED
        self.marker_set = MarkerSet(document)
        self.scanner = Scanner(
            self.marker_set,
            self.settings.make_policy(),
            include_comments=self.settings.include_comments,
            style=self.settings.highlight_style,
        )
        self.mode_line_label = self._format_label()
        document.local_variables[LOCAL_VARIABLE] = self

    @classmethod
    def for_document(cls, document: "Document",
                     settings: Optional[OverflowSettings] = None) -> "ModeController":
        """Return the document's controller, creating it on first use.

        `settings` only applies when the controller is created.
        """
        controller = document.local_variables.get(LOCAL_VARIABLE)
        if controller is None:
            controller = cls(document, settings)
        return controller

    def _format_label(self) -> str:
        return ColumnmarkConstants.MODE_LINE_FORMAT.format(self.scanner.policy.static_limit)

    @property
    def enabled(self) -> bool:
        return self.state is ModeState.ENABLED

    @property
    def column_limit(self) -> int:
        return self.scanner.policy.static_limit

    @property
    def markers(self) -> list[Marker]:
        return self.marker_set.markers

    # --- State transitions ---

    def enable(self) -> None:
        """Enable highlighting and scan the whole document."""
        if not self.enabled:
            self.document.add_change_listener(self._on_change)
            self.document.add_render_listener(self._on_render)
            self.state = ModeState.ENABLED
            logger.debug(f"Overflow highlighting enabled for {self.document.name}")
        self.rescan()

    def disable(self) -> None:
        """Remove every marker and stop listening to the document."""
        removed = self.marker_set.remove_all_markers()
        self.document.remove_change_listener(self._on_change)
        self.document.remove_render_listener(self._on_render)
        if self.enabled:
            logger.debug(f"Overflow highlighting disabled for {self.document.name} ({removed} markers removed)")
        self.state = ModeState.DISABLED

    def toggle(self) -> None:
        if self.enabled:
            self.disable()
        else:
            self.enable()

    def toggle_if_applicable(self) -> bool:
        """Disable if enabled; otherwise enable, but only for code.

        Returns True if highlighting is enabled afterwards.
        """
        if self.enabled:
            self.disable()
        elif self.document.content_category == ColumnmarkConstants.CATEGORY_PROGRAMMING:
            self.enable()
        else:
            logger.debug(f"Not enabling for {self.document.name}: not a programming document")
        return self.enabled

    # --- Settings ---

    def set_limit(self, limit) -> int:
        """Set a fixed column limit; rescans immediately when enabled."""
        limit = validate_limit(limit)
        self.settings = self.settings.with_limit(limit)
        self.scanner.policy.limit = limit
        self.mode_line_label = self._format_label()
        get_session().set(SessionKeys.LAST_COLUMN_LIMIT, limit)
        if self.enabled:
            self.rescan()
        return limit

    def set_include_comments(self, include: bool) -> None:
        include = bool(include)
        self.settings = replace(self.settings, include_comments=include)
        self.scanner.include_comments = include
        if self.enabled:
            self.rescan()

    def set_resolver(self, resolver: Optional[ColumnResolver]) -> None:
        """Install (or with None, remove) a per-line limit callback."""
        self.settings = replace(self.settings, column_limit_resolver=resolver)
        self.scanner.policy.resolver = resolver
        if self.enabled:
            self.rescan()

    # --- Scanning ---

    def rescan(self) -> list[Marker]:
        """Scan the full document."""
        return self.scanner.scan(self.document, 0, len(self.document))

    def _on_change(self, start: int, end: int) -> None:
        self.scanner.scan(self.document, start, end)

    def _on_render(self, start: int, end: int) -> None:
        self.scanner.scan(self.document, start, end)


class GlobalOverflowMode:
    """Enable highlighting for every programming document in a workspace.

    Documents opened while the global mode is on get `toggle_if_applicable`,
    so prose documents are never switched on automatically.
    """

    def __init__(self, workspace: "Workspace", settings: Optional[OverflowSettings] = None):
        self.workspace = workspace
        self.settings = settings
        self.enabled = False

    @classmethod
    def restore(cls, workspace: "Workspace",
                settings: Optional[OverflowSettings] = None) -> "GlobalOverflowMode":
        """Build a global mode that is on if it was left on in this session."""
        mode = cls(workspace, settings)
        if get_session().get(SessionKeys.GLOBAL_MODE):
            mode.enable()
        return mode

    def _turn_on(self, document: "Document") -> None:
        controller = ModeController.for_document(document, self.settings)
        if not controller.enabled:
            controller.toggle_if_applicable()

    def enable(self) -> None:
        if not self.enabled:
            self.workspace.add_open_hook(self._turn_on)
            self.enabled = True
            get_session().set(SessionKeys.GLOBAL_MODE, True)
        for document in self.workspace.documents:
            self._turn_on(document)

    def disable(self) -> None:
        self.workspace.remove_open_hook(self._turn_on)
        self.enabled = False
        get_session().set(SessionKeys.GLOBAL_MODE, False)
        for document in self.workspace.documents:
            controller = document.local_variables.get(LOCAL_VARIABLE)
            if controller is not None and controller.enabled:
                controller.disable()

    def toggle(self) -> None:
        if self.enabled:
            self.disable()
        else:
            self.enable()
