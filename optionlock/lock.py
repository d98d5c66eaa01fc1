"""Attach OptionLock to a host, and detach leaving the host usable."""

from __future__ import annotations

import logging

from optionlock.registry.classifier import AllowList, ItemGroup, classify_host
from optionlock.registry.governed import GovernedItemRegistry
from optionlock.sync.engine import ReconciliationEngine
from optionlock.sync.policy import HostPredicates
from optionlock.sync.router import EventRouter

logger = logging.getLogger(__name__)


class OptionLock:
    """Keeps the host's UI disabled while no unlocked document is open.

    ``initialize`` classifies the host UI, subscribes to every governed
    item and to the host's document events, and applies the policy once.
    ``terminate`` undoes all of it and re-enables every governed item.
    """

    def __init__(self, allow_list: AllowList | None = None):
        self.allow_list = allow_list
        self.host = None
        self.registry = GovernedItemRegistry()
        self.engine: ReconciliationEngine | None = None
        self.router: EventRouter | None = None

    @property
    def is_running(self) -> bool:
        return self.router is not None

    def initialize(self, host) -> bool:
        """Attach to ``host``.

        Raises:
            HostShapeError: the host UI tree could not be classified.
            Any error raised while subscribing or writing initial values.
            In every case no subscriptions are left behind and every
            governed item is re-enabled.
        """
        if self.is_running:
            raise RuntimeError("OptionLock is already initialized")

        self.host = host
        try:
            classification = classify_host(host, self.allow_list)

            self.registry.populate(classification)
            self.engine = ReconciliationEngine(
                self.registry, HostPredicates(host, classification.distinguished)
            )
            self.router = EventRouter(self.engine)

            self.registry.subscribe(
                classification.distinguished, self.router.on_has_docs_changed
            )
            for handle in self.registry.unlocked_db_items:
                self.registry.subscribe(handle, self.router.handler_for_group(ItemGroup.UNLOCKED_DB))
            for handle in self.registry.no_doc_items:
                self.registry.subscribe(handle, self.router.handler_for_group(ItemGroup.NO_DOC))

            written = self.engine.reconcile_all()

            host.file_opened.subscribe(self.router.on_file_opened)
            host.file_closed.subscribe(self.router.on_file_closed)
        except BaseException as e:
            logger.error("cannot attach to host: %s", e)
            self.terminate()
            raise

        logger.info(
            "attached: %d unlocked-db items, %d no-doc items, indicator=%s (%d written)",
            len(self.registry.unlocked_db_items),
            len(self.registry.no_doc_items),
            classification.distinguished.name,
            written,
        )
        return True

    def terminate(self) -> None:
        """Detach from the host and re-enable every governed item.

        Safe to call more than once, and after a failed ``initialize``.
        """
        if self.host is not None and self.router is not None:
            for event, handler in (
                (getattr(self.host, "file_opened", None), self.router.on_file_opened),
                (getattr(self.host, "file_closed", None), self.router.on_file_closed),
            ):
                if event is not None:
                    event.unsubscribe(handler)

        released = self.registry.release_all()
        for handle in released:
            handle.enabled = True
        self.registry.clear()

        if released:
            logger.info("detached: %d items re-enabled", len(released))

        self.router = None
        self.engine = None
        self.host = None
