"""Apply scenario steps to a simulated host running OptionLock."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from optionlock.host.layout import build_host
from optionlock.host.simulated import SimulatedHost
from optionlock.lock import OptionLock
from optionlock.registry.classifier import AllowList
from optionlock.simulation.scenario import Scenario, ScenarioStep
from optionlock.sync.drift import DriftDetector, DriftReport

logger = logging.getLogger(__name__)


@dataclass
class StepResult:
    """State of the governed items after one step."""

    label: str
    drift: DriftReport
    states: dict[str, bool] = field(default_factory=dict)


@dataclass
class ScenarioResult:
    name: str
    steps: list[StepResult] = field(default_factory=list)
    final_states: dict[str, bool] = field(default_factory=dict)

    @property
    def converged(self) -> bool:
        return not any(s.drift.has_drift for s in self.steps)


class ScenarioRunner:
    """Runs a scenario from attach to detach."""

    def __init__(self, scenario: Scenario, allow_list: AllowList | None = None):
        self.scenario = scenario
        self.host: SimulatedHost = build_host(scenario.layout)
        self.lock = OptionLock(allow_list)

    def run(self) -> ScenarioResult:
        result = ScenarioResult(name=self.scenario.name)

        self.lock.initialize(self.host)
        detector = DriftDetector(self.lock.engine)
        result.steps.append(self._snapshot("initialize", detector))

        try:
            for step in self.scenario.steps:
                self.apply(step)
                result.steps.append(self._snapshot(step.describe(), detector))
        finally:
            governed = self.lock.registry.governed()
            self.lock.terminate()
            result.final_states = {h.name: h.enabled for h in governed}

        return result

    def apply(self, step: ScenarioStep) -> None:
        logger.debug("step: %s", step.describe())
        if step.action == "open":
            self.host.open_document(step.document, locked=step.locked)
        elif step.action == "close":
            self.host.close_document(step.document)
        elif step.action == "lock":
            self.host.lock_document(step.document)
        elif step.action == "unlock":
            self.host.unlock_document(step.document)
        elif step.action == "set":
            self.host.find_item(step.item).enabled = step.enabled
        elif step.action == "refresh":
            self.host.refresh_ui()

    def _snapshot(self, label: str, detector: DriftDetector) -> StepResult:
        return StepResult(
            label=label,
            drift=detector.check(),
            states={h.name: h.enabled for h in self.lock.registry.governed()},
        )
