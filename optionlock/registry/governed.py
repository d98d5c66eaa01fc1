"""Governed item registry — group membership and the subscription table."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from optionlock.host.models import Handler, MenuItem
from optionlock.registry.classifier import Classification, ItemGroup

logger = logging.getLogger(__name__)


class GovernedItemRegistry:
    """Tracks which handles OptionLock governs and which handler listens to each.

    Membership is fixed once ``populate`` runs and stays fixed until
    ``clear``. A handle has at most one subscription; ``subscribe`` and
    ``unsubscribe`` are idempotent.
    """

    def __init__(self) -> None:
        self.unlocked_db_items: list[MenuItem] = []
        self.no_doc_items: list[MenuItem] = []
        self.distinguished: MenuItem | None = None
        self._groups: dict[MenuItem, ItemGroup] = {}
        self._subscriptions: dict[MenuItem, Handler] = {}

    def populate(self, classification: Classification) -> None:
        if self._groups:
            raise RuntimeError("Registry is already populated")

        self.unlocked_db_items = list(classification.unlocked_db_items)
        self.no_doc_items = list(classification.no_doc_items)
        self.distinguished = classification.distinguished

        for item in self.unlocked_db_items:
            self._groups[item] = ItemGroup.UNLOCKED_DB
        for item in self.no_doc_items:
            self._groups[item] = ItemGroup.NO_DOC
        if self.distinguished is not None:
            self._groups[self.distinguished] = ItemGroup.DISTINGUISHED

    def group_of(self, handle) -> ItemGroup | None:
        """Return the group of a tracked handle, or None for anything else."""
        if not isinstance(handle, MenuItem):
            return None
        return self._groups.get(handle)

    def governed(self) -> list[MenuItem]:
        """All handles whose enabled state OptionLock writes."""
        return self.unlocked_db_items + self.no_doc_items

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, handle: MenuItem, handler: Handler) -> None:
        if handle in self._subscriptions:
            return
        handle.enabled_changed.subscribe(handler)
        self._subscriptions[handle] = handler

    def unsubscribe(self, handle: MenuItem) -> None:
        handler = self._subscriptions.pop(handle, None)
        if handler is not None:
            handle.enabled_changed.unsubscribe(handler)

    def handler_for(self, handle: MenuItem) -> Handler | None:
        return self._subscriptions.get(handle)

    def is_attached(self, handle: MenuItem) -> bool:
        """True when the handle's handler is currently receiving notifications."""
        handler = self._subscriptions.get(handle)
        return handler is not None and handler in handle.enabled_changed

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    @contextmanager
    def muted(self, handle: MenuItem) -> Iterator[None]:
        """Detach the handle's handler for the duration of the block.

        The subscription stays recorded; only the live attachment to the
        handle's notification channel is removed and then restored.
        """
        handler = self._subscriptions.get(handle)
        if handler is None:
            yield
            return

        handle.enabled_changed.unsubscribe(handler)
        try:
            yield
        finally:
            handle.enabled_changed.subscribe(handler)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def release_all(self) -> list[MenuItem]:
        """Unsubscribe every handle and return the governed ones."""
        for handle in list(self._subscriptions):
            self.unsubscribe(handle)
        return self.governed()

    def clear(self) -> None:
        self.release_all()
        self.unlocked_db_items = []
        self.no_doc_items = []
        self.distinguished = None
        self._groups.clear()

    def __len__(self) -> int:
        return len(self._groups)
