"""Scenario files."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from optionlock.host.layout import HostLayout

ActionName = Literal["open", "close", "lock", "unlock", "set", "refresh"]


class ScenarioStep(BaseModel):
    """One host action.

    ``open``/``close``/``lock``/``unlock`` take a ``document``; ``set`` is an
    external write of ``enabled`` to the named ``item``; ``refresh`` lets the
    host rewrite its own items.
    """

    action: ActionName
    document: Optional[str] = None
    locked: bool = False
    item: Optional[str] = None
    enabled: Optional[bool] = None

    @model_validator(mode="after")
    def _check_arguments(self) -> "ScenarioStep":
        if self.action in ("open", "close", "lock", "unlock") and not self.document:
            raise ValueError(f"'{self.action}' needs a document")
        if self.action == "set" and (not self.item or self.enabled is None):
            raise ValueError("'set' needs an item and an enabled value")
        return self

    def describe(self) -> str:
        if self.action == "set":
            return f"set {self.item}={self.enabled}"
        if self.action == "refresh":
            return "refresh"
        suffix = " (locked)" if self.action == "open" and self.locked else ""
        return f"{self.action} {self.document}{suffix}"


class Scenario(BaseModel):
    name: str = "scenario"
    description: str = ""
    layout: Optional[HostLayout] = None
    steps: list[ScenarioStep] = Field(default_factory=list)


def load_scenario(path: str | Path) -> Scenario:
    """Load a scenario from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return Scenario.model_validate(data)
