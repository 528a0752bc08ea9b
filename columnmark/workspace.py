"""Workspace: the set of open documents and the hooks run when one opens."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .model import Document

logger = logging.getLogger(__name__)

OpenHook = Callable[[Document], None]


class Workspace:
    def __init__(self):
        self.documents: list[Document] = []
        self._open_hooks: list[OpenHook] = []

    def add_open_hook(self, hook: OpenHook) -> None:
        if hook not in self._open_hooks:
            self._open_hooks.append(hook)

    def remove_open_hook(self, hook: OpenHook) -> None:
        if hook in self._open_hooks:
            self._open_hooks.remove(hook)

    def add_document(self, document: Document) -> Document:
        """Register an already built document and run the open hooks."""
        self.documents.append(document)
        for hook in list(self._open_hooks):
            hook(document)
        return document

    def open_file(self, path: str, content_type: Optional[str] = None) -> Document:
        document = Document.from_file(path, content_type=content_type)
        logger.debug(f"Opened {path} ({len(document)} characters)")
        return self.add_document(document)

    def open_text(self, text: str, name: Optional[str] = None, filename: Optional[str] = None,
                  content_type: Optional[str] = None) -> Document:
        return self.add_document(Document(text, name=name, filename=filename, content_type=content_type))

    def close_document(self, document: Document) -> None:
        """Forget a document, switching off its highlighting first."""
        from .mode import LOCAL_VARIABLE

        controller = document.local_variables.get(LOCAL_VARIABLE)
        if controller is not None:
            controller.disable()
        self.documents = [d for d in self.documents if d is not document]
