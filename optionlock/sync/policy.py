"""Lock policy — the rules mapping document state to desired enabled state.

The two predicates are queried against the host on every decision and
never cached. The host flips its own state in an order OptionLock does
not control, and a stale copy would lose races against it.
"""

from __future__ import annotations

from optionlock.host.models import MenuItem


class HostPredicates:
    """Live queries against the host's document state."""

    def __init__(self, host, has_docs_item: MenuItem):
        self.host = host
        self.has_docs_item = has_docs_item

    def at_least_one_unlocked(self) -> bool:
        """True if any document is open and not locked."""
        for doc in self.host.document_manager.documents:
            if doc.is_open and not self.host.is_file_locked(doc):
                return True
        return False

    def has_docs(self) -> bool:
        """True if at least one document is open, as reported by the host's indicator item."""
        return self.has_docs_item.enabled

    def has_no_docs(self) -> bool:
        return not self.has_docs()


def unlocked_db_policy(unlocked: bool) -> bool:
    return unlocked


def no_doc_policy(has_docs: bool, unlocked: bool) -> bool:
    return not has_docs or unlocked
