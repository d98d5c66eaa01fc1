"""Event router — the entry points that trigger reconciliation.

The host fires ``file_opened`` after enabling its has-docs indicator and
``file_closed`` before disabling it, once per document. Only the
indicator's own change notification lands exactly on the zero/non-zero
document boundary, so that is where no-doc items resync. The document
events move unlocked-db items, and no-doc items only when the outcome is
unambiguous.
"""

from __future__ import annotations

import logging

from optionlock.registry.classifier import ItemGroup
from optionlock.sync.engine import ReconciliationEngine

logger = logging.getLogger(__name__)


class EventRouter:
    """Named handlers wired to host events and governed item notifications."""

    def __init__(self, engine: ReconciliationEngine):
        self.engine = engine
        self.registry = engine.registry
        self.predicates = engine.predicates

    def on_file_opened(self, sender, args=None) -> None:
        unlocked = self.predicates.at_least_one_unlocked()
        logger.debug("file opened: unlocked=%s", unlocked)
        if unlocked:
            self.engine.force_group(ItemGroup.UNLOCKED_DB, True)
            self.engine.force_group(ItemGroup.NO_DOC, True)

    def on_file_closed(self, sender, args=None) -> None:
        unlocked = self.predicates.at_least_one_unlocked()
        has_docs = self.predicates.has_docs()
        logger.debug("file closed: unlocked=%s has_docs=%s", unlocked, has_docs)
        if unlocked:
            return

        self.engine.force_group(ItemGroup.UNLOCKED_DB, False)
        # On the last close the indicator is still enabled here; it is
        # disabled afterwards and on_has_docs_changed re-enables no-doc items.
        if has_docs:
            self.engine.force_group(ItemGroup.NO_DOC, False)

    def on_has_docs_changed(self, sender, args=None) -> None:
        has_no_docs = self.predicates.has_no_docs()
        logger.debug("has-docs indicator changed: has_no_docs=%s", has_no_docs)
        self.engine.force_group(ItemGroup.NO_DOC, has_no_docs)

    def on_no_doc_item_changed(self, sender, args=None) -> None:
        if self.registry.group_of(sender) != ItemGroup.NO_DOC:
            return
        if self.predicates.has_no_docs():
            self.engine.set_desired(sender, True)
        else:
            self.engine.set_desired(sender, self.predicates.at_least_one_unlocked())

    def on_unlocked_item_changed(self, sender, args=None) -> None:
        if self.registry.group_of(sender) != ItemGroup.UNLOCKED_DB:
            return
        self.engine.set_desired(sender, self.predicates.at_least_one_unlocked())

    def handler_for_group(self, group: ItemGroup):
        if group == ItemGroup.UNLOCKED_DB:
            return self.on_unlocked_item_changed
        if group == ItemGroup.NO_DOC:
            return self.on_no_doc_item_changed
        if group == ItemGroup.DISTINGUISHED:
            return self.on_has_docs_changed
        raise ValueError(f"No handler for {group.value} items")
