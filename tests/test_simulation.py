"""Tests for scenario loading, the scenario runner, and the CLI."""

import tempfile
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner
from pydantic import ValidationError

from optionlock.cli import main
from optionlock.registry.classifier import DEFAULT_ALLOW_LIST, load_allow_list
from optionlock.simulation.runner import ScenarioRunner
from optionlock.simulation.scenario import Scenario, ScenarioStep, load_scenario


def _write_yaml(data) -> str:
    f = tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False)
    yaml.dump(data, f)
    f.close()
    return f.name


LAST_DOCUMENT = {
    "name": "last-document",
    "steps": [
        {"action": "open", "document": "a.kdbx"},
        {"action": "set", "item": "m_menuFileClose", "enabled": False},
        {"action": "lock", "document": "a.kdbx"},
        {"action": "refresh"},
        {"action": "close", "document": "a.kdbx"},
    ],
}


# --- Scenario files ---


def test_load_scenario():
    scenario = load_scenario(_write_yaml(LAST_DOCUMENT))
    assert scenario.name == "last-document"
    assert len(scenario.steps) == 5
    assert scenario.layout is None
    assert scenario.steps[1].describe() == "set m_menuFileClose=False"


def test_step_requires_document():
    with pytest.raises(ValidationError):
        ScenarioStep(action="close")


def test_set_step_requires_item_and_value():
    with pytest.raises(ValidationError):
        ScenarioStep(action="set", item="m_menuFileClose")


def test_unknown_action_rejected():
    with pytest.raises(ValidationError):
        Scenario.model_validate({"steps": [{"action": "explode"}]})


# --- Runner ---


def test_runner_converges_and_restores():
    result = ScenarioRunner(load_scenario(_write_yaml(LAST_DOCUMENT))).run()

    assert result.converged
    assert [s.label for s in result.steps][0] == "initialize"
    assert len(result.steps) == 6
    assert result.steps[1].states["m_menuFileClose"] is True
    assert result.steps[2].states["m_menuFileClose"] is True
    assert result.steps[3].states["m_menuFileClose"] is False
    assert result.steps[-1].states["m_menuFileOpen"] is True
    assert all(result.final_states.values())


def test_runner_with_custom_layout():
    scenario = Scenario.model_validate(
        {
            "layout": {
                "tray": [],
                "main_menu": {"m_menuFile": ["m_menuFileOpen", "m_menuFileLock", "m_menuFileSave"]},
                "toolbars": {"m_toolMain": []},
            },
            "steps": [{"action": "open", "document": "a", "locked": True}],
        }
    )
    result = ScenarioRunner(scenario).run()
    assert result.steps[-1].states == {"m_menuFileSave": False, "m_menuFileOpen": False}


# --- CLI ---


def test_cli_simulate_check_passes():
    runner = CliRunner()
    result = runner.invoke(main, ["simulate", _write_yaml(LAST_DOCUMENT), "--check"])
    assert result.exit_code == 0, result.output
    assert "last-document" in result.output
    assert "re-enabled" in result.output


def test_cli_simulate_bad_scenario():
    runner = CliRunner()
    result = runner.invoke(main, ["simulate", _write_yaml({"steps": [{"action": "close"}]})])
    assert result.exit_code == 2


def test_cli_simulate_incompatible_layout():
    runner = CliRunner()
    path = _write_yaml({"layout": {"toolbars": {"m_toolMain": []}}, "steps": []})
    result = runner.invoke(main, ["simulate", path])
    assert result.exit_code == 1
    assert "Incompatible" in result.output


def test_cli_allow_list():
    runner = CliRunner()
    result = runner.invoke(main, ["allow-list"])
    assert result.exit_code == 0
    assert "m_menuFileLock" in result.output
    assert "m_toolMain" in result.output


def test_cli_allow_list_bad_file():
    runner = CliRunner()
    result = runner.invoke(main, ["allow-list", "-a", _write_yaml({"sidebar": {}})])
    assert result.exit_code == 2


def test_cli_layout():
    runner = CliRunner()
    result = runner.invoke(main, ["layout"])
    assert result.exit_code == 0
    assert "m_tbOpenDatabase" in result.output
    assert "ungoverned" in result.output


# --- Shipped scenarios ---


SCENARIO_DIR = Path(__file__).resolve().parent.parent / "scenarios"


@pytest.mark.parametrize("name", ["last_document.yaml", "mixed_locks.yaml"])
def test_shipped_scenarios_converge(name):
    result = ScenarioRunner(load_scenario(SCENARIO_DIR / name)).run()
    assert result.converged
    assert all(result.final_states.values())


def test_shipped_allow_list_matches_default():
    assert load_allow_list(SCENARIO_DIR / "allow_list.yaml") == DEFAULT_ALLOW_LIST
