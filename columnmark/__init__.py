"""Columnmark - highlight text that runs past a column limit."""

from .config import HighlightStyle, OverflowSettings
from .markers import Marker, MarkerSet
from .mode import GlobalOverflowMode, ModeController, ModeState
from .model import Document
from .policy import ColumnPolicy, LineContext
from .scanner import Scanner
from .workspace import Workspace

__all__ = [
    'ColumnPolicy',
    'Document',
    'GlobalOverflowMode',
    'HighlightStyle',
    'LineContext',
    'Marker',
    'MarkerSet',
    'ModeController',
    'ModeState',
    'OverflowSettings',
    'Scanner',
    'Workspace',
]
