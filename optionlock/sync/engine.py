"""Reconciliation engine — write policy values back to governed handles.

Every write goes through ``set_desired``, which skips handles already at
the desired value and otherwise mutes the handle's own change handler
around the write so the correction cannot re-enter the engine.
"""

from __future__ import annotations

import logging

from optionlock.host.models import MenuItem
from optionlock.registry.classifier import ItemGroup
from optionlock.registry.governed import GovernedItemRegistry
from optionlock.sync.policy import HostPredicates, no_doc_policy, unlocked_db_policy

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """Applies the lock policy to the handles in a registry."""

    def __init__(self, registry: GovernedItemRegistry, predicates: HostPredicates):
        self.registry = registry
        self.predicates = predicates

    def set_desired(self, handle: MenuItem, desired: bool) -> bool:
        """Set ``handle.enabled`` to ``desired`` if it differs.

        Returns True if a write happened. An unchanged handle is neither
        written nor re-subscribed, since some hosts treat identical writes
        as change events.
        """
        if handle.enabled == desired:
            return False

        with self.registry.muted(handle):
            handle.enabled = desired

        logger.debug("set %s: %s -> %s", handle.name, not desired, desired)
        return True

    def policy_for_group_a(self) -> bool:
        return unlocked_db_policy(self.predicates.at_least_one_unlocked())

    def policy_for_group_b(self) -> bool:
        return no_doc_policy(
            self.predicates.has_docs(), self.predicates.at_least_one_unlocked()
        )

    def policy_for(self, group: ItemGroup) -> bool:
        if group == ItemGroup.UNLOCKED_DB:
            return self.policy_for_group_a()
        if group == ItemGroup.NO_DOC:
            return self.policy_for_group_b()
        raise ValueError(f"No policy for {group.value} items")

    def reconcile_all(self) -> int:
        """Bring every governed handle to its group's policy value.

        Returns the number of handles written.
        """
        written = self.force_group(ItemGroup.UNLOCKED_DB, self.policy_for_group_a())
        written += self.force_group(ItemGroup.NO_DOC, self.policy_for_group_b())
        return written

    def reconcile_one(self, handle: MenuItem) -> bool:
        group = self.registry.group_of(handle)
        if group not in (ItemGroup.UNLOCKED_DB, ItemGroup.NO_DOC):
            return False
        return self.set_desired(handle, self.policy_for(group))

    def force_group(self, group: ItemGroup, desired: bool) -> int:
        """Set every handle of one group to ``desired``."""
        if group == ItemGroup.UNLOCKED_DB:
            handles = self.registry.unlocked_db_items
        elif group == ItemGroup.NO_DOC:
            handles = self.registry.no_doc_items
        else:
            raise ValueError(f"{group.value} items are not written by the engine")

        written = 0
        for handle in handles:
            if self.set_desired(handle, desired):
                written += 1
        return written
