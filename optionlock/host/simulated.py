"""In-memory host context.

Implements the surface OptionLock reads from a host application, including
the host's own event ordering:

- The has-docs item is enabled *before* ``file_opened`` fires for the first
  document, and disabled *after* ``file_closed`` fires for the last one.
- ``file_opened`` / ``file_closed`` fire once per document, not once per
  zero/non-zero transition.
- Locking a document closes its database but keeps the tab, so the host
  fires ``file_closed`` and keeps counting the document as present.
- ``refresh_ui`` rewrites the enabled flag of some items on the host's own
  schedule, bypassing OptionLock entirely.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from optionlock.host.models import (
    Container,
    Document,
    DocumentManager,
    DropDownItem,
    EnabledChanged,
    MenuItem,
)

logger = logging.getLogger(__name__)


@dataclass
class FileEventArgs:
    """Payload for ``file_opened`` / ``file_closed``."""

    document: Document


@dataclass
class SimulatedHost:
    """A host application whose UI tree and documents live in memory."""

    tray_menu: Container
    main_menu: Container
    controls: list[Container] = field(default_factory=list)
    document_manager: DocumentManager = field(default_factory=DocumentManager)
    has_docs_item_name: str = "m_menuFileLock"
    refresh_item_names: list[str] = field(default_factory=list)
    file_opened: EnabledChanged = field(default_factory=EnabledChanged, repr=False)
    file_closed: EnabledChanged = field(default_factory=EnabledChanged, repr=False)

    # ------------------------------------------------------------------
    # Queries used by OptionLock
    # ------------------------------------------------------------------

    def index_of_control(self, key: str) -> int:
        """Return the index of the named top-level control, or -1."""
        for i, control in enumerate(self.controls):
            if control.name == key:
                return i
        return -1

    def is_file_locked(self, document: Document) -> bool:
        return document.locked

    # ------------------------------------------------------------------
    # Item lookup
    # ------------------------------------------------------------------

    def iter_items(self):
        """Yield every item in the tray, main menu drop-downs and toolbars."""
        yield from (i for i in self.tray_menu.items if isinstance(i, MenuItem))
        for top in self.main_menu.items:
            if isinstance(top, DropDownItem):
                yield from (i for i in top.drop_down_items if isinstance(i, MenuItem))
        for control in self.controls:
            yield from (i for i in control.items if isinstance(i, MenuItem))

    def find_item(self, name: str) -> MenuItem:
        for item in self.iter_items():
            if item.name == name:
                return item
        raise KeyError(f"No host item named '{name}'")

    def _has_docs_item(self) -> MenuItem | None:
        for item in self.iter_items():
            if item.name == self.has_docs_item_name:
                return item
        return None

    # ------------------------------------------------------------------
    # Host behaviour
    # ------------------------------------------------------------------

    def open_document(self, name: str, locked: bool = False) -> Document:
        if self.document_manager.get(name) is not None:
            raise ValueError(f"Document '{name}' is already open")

        doc = Document(name=name, is_open=not locked, locked=locked)
        self.document_manager.documents.append(doc)
        logger.debug("host: opened %s (locked=%s)", name, locked)

        indicator = self._has_docs_item()
        if indicator is not None and len(self.document_manager) == 1:
            indicator.enabled = True

        self.file_opened.fire(self, FileEventArgs(doc))
        return doc

    def close_document(self, name: str) -> None:
        doc = self._require(name)
        doc.is_open = False
        self.document_manager.documents.remove(doc)
        logger.debug("host: closed %s", name)

        self.file_closed.fire(self, FileEventArgs(doc))

        indicator = self._has_docs_item()
        if indicator is not None and len(self.document_manager) == 0:
            indicator.enabled = False

    def lock_document(self, name: str) -> None:
        doc = self._require(name)
        if doc.locked:
            return
        doc.locked = True
        doc.is_open = False
        logger.debug("host: locked %s", name)
        self.file_closed.fire(self, FileEventArgs(doc))

    def unlock_document(self, name: str) -> None:
        doc = self._require(name)
        if not doc.locked:
            return
        doc.locked = False
        doc.is_open = True
        logger.debug("host: unlocked %s", name)
        self.file_opened.fire(self, FileEventArgs(doc))

    def refresh_ui(self) -> None:
        """Re-derive the enabled flag of the refresh items from the host's own view."""
        state = len(self.document_manager) > 0
        for name in self.refresh_item_names:
            self.find_item(name).enabled = state

    def _require(self, name: str) -> Document:
        doc = self.document_manager.get(name)
        if doc is None:
            raise ValueError(f"Document '{name}' is not open")
        return doc
