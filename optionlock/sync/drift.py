"""Find governed handles whose enabled flag disagrees with policy."""

from __future__ import annotations

from dataclasses import dataclass, field

from optionlock.registry.classifier import ItemGroup
from optionlock.sync.engine import ReconciliationEngine


@dataclass
class ItemDrift:
    """A single governed handle out of line with its policy."""

    name: str
    group: ItemGroup
    expected: bool
    actual: bool


@dataclass
class DriftReport:
    """Snapshot of every governed handle against the current policy."""

    unlocked: bool
    has_docs: bool
    drifted: list[ItemDrift] = field(default_factory=list)
    checked: int = 0

    @property
    def has_drift(self) -> bool:
        return len(self.drifted) > 0

    def summary(self) -> str:
        state = f"unlocked={self.unlocked} has_docs={self.has_docs}"
        if not self.has_drift:
            return f"{self.checked} items in line ({state})"
        names = ", ".join(d.name for d in self.drifted)
        return f"{len(self.drifted)}/{self.checked} items DRIFTED ({state}): {names}"


class DriftDetector:
    """Checks a running engine's handles against its policies."""

    def __init__(self, engine: ReconciliationEngine):
        self.engine = engine

    def check(self) -> DriftReport:
        registry = self.engine.registry
        report = DriftReport(
            unlocked=self.engine.predicates.at_least_one_unlocked(),
            has_docs=self.engine.predicates.has_docs(),
        )

        for group, handles in (
            (ItemGroup.UNLOCKED_DB, registry.unlocked_db_items),
            (ItemGroup.NO_DOC, registry.no_doc_items),
        ):
            expected = self.engine.policy_for(group)
            for handle in handles:
                report.checked += 1
                if handle.enabled != expected:
                    report.drifted.append(
                        ItemDrift(
                            name=handle.name,
                            group=group,
                            expected=expected,
                            actual=handle.enabled,
                        )
                    )

        return report
