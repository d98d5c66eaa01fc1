"""OptionLock CLI — inspect allow-lists and host layouts, and run lock scenarios."""

import logging
import sys

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from optionlock import __version__

console = Console()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_allow_list_or_exit(path: str | None):
    from optionlock.registry.classifier import DEFAULT_ALLOW_LIST, load_allow_list

    if not path:
        return DEFAULT_ALLOW_LIST
    try:
        return load_allow_list(path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Failed to load allow-list:[/] {e}")
        sys.exit(2)


def _flag(value: bool) -> str:
    return "[green]on[/]" if value else "[red]off[/]"


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
)
def main(log_level: str):
    """OptionLock — lock down a host's UI while no unlocked document is open.

    Items are disabled while every open document is locked, re-enabled as
    soon as one is unlocked, and restored when OptionLock detaches.
    """
    _configure_logging(log_level)


# ── Allow-list ───────────────────────────────────────────────────────


@main.command(name="allow-list")
@click.option("--allow-list", "-a", "allow_list_path", default=None, help="Allow-list YAML file")
def show_allow_list(allow_list_path: str | None):
    """Print the classification rules in effect."""
    allow_list = _load_allow_list_or_exit(allow_list_path)

    table = Table(title=f"Allow-list (toolbar: {allow_list.toolbar_key})")
    table.add_column("Container", style="cyan")
    table.add_column("Item")
    table.add_column("Group")

    for container, rules in allow_list.rules().items():
        for name in rules.exempt:
            table.add_row(container, name, "ungoverned")
        for name in rules.no_doc:
            table.add_row(container, name, "no-doc")
        for name in rules.distinguished:
            table.add_row(container, name, "[bold]distinguished[/]")

    console.print(table)
    console.print("[dim]Any other item is governed as unlocked-db.[/]")


# ── Layout ───────────────────────────────────────────────────────────


@main.command()
@click.option("--layout", "-l", "layout_path", default=None, help="Host layout YAML file")
@click.option("--allow-list", "-a", "allow_list_path", default=None, help="Allow-list YAML file")
def layout(layout_path: str | None, allow_list_path: str | None):
    """Classify every item of a host layout."""
    from optionlock.exceptions import HostShapeError
    from optionlock.host.layout import build_host, load_layout
    from optionlock.registry.classifier import classify_host

    allow_list = _load_allow_list_or_exit(allow_list_path)
    try:
        host_layout = load_layout(layout_path) if layout_path else None
    except (OSError, ValidationError) as e:
        console.print(f"[red]Failed to load layout:[/] {e}")
        sys.exit(2)

    try:
        result = classify_host(build_host(host_layout), allow_list)
    except HostShapeError as e:
        console.print(f"[red]Incompatible host layout:[/] {e}")
        sys.exit(1)

    table = Table(title="Host layout classification")
    table.add_column("Item", style="cyan")
    table.add_column("Group")
    for item in result.unlocked_db_items:
        table.add_row(item.name, "unlocked-db")
    for item in result.no_doc_items:
        table.add_row(item.name, "no-doc")
    table.add_row(result.distinguished.name, "[bold]distinguished[/]")
    for item in result.ungoverned:
        table.add_row(item.name, "[dim]ungoverned[/]")

    console.print(table)


# ── Simulate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("scenario_path")
@click.option("--allow-list", "-a", "allow_list_path", default=None, help="Allow-list YAML file")
@click.option("--check", is_flag=True, help="Exit with status 1 if any step leaves drift")
def simulate(scenario_path: str, allow_list_path: str | None, check: bool):
    """Run a scenario against an in-memory host with OptionLock attached."""
    from optionlock.exceptions import HostShapeError
    from optionlock.simulation.runner import ScenarioRunner
    from optionlock.simulation.scenario import load_scenario

    allow_list = _load_allow_list_or_exit(allow_list_path)
    try:
        scenario = load_scenario(scenario_path)
    except (OSError, ValidationError) as e:
        console.print(f"[red]Failed to load scenario:[/] {e}")
        sys.exit(2)

    console.print(f"\n[bold blue]OptionLock[/] — Scenario: {scenario.name}\n")

    try:
        result = ScenarioRunner(scenario, allow_list).run()
    except HostShapeError as e:
        console.print(f"[red]Incompatible host layout:[/] {e}")
        sys.exit(1)
    except (KeyError, ValueError) as e:
        console.print(f"[red]Scenario step failed:[/] {e}")
        sys.exit(2)

    names = list(result.steps[0].states) if result.steps else []
    table = Table(title=f"Governed items ({len(names)})")
    table.add_column("Step", style="cyan")
    table.add_column("Unlocked", justify="center")
    table.add_column("Docs", justify="center")
    for name in names:
        table.add_column(name, justify="center")
    table.add_column("Drift")

    for step in result.steps:
        drift = "[red]DRIFT[/]" if step.drift.has_drift else "[green]OK[/]"
        table.add_row(
            step.label,
            _flag(step.drift.unlocked),
            _flag(step.drift.has_docs),
            *[_flag(step.states[n]) for n in names],
            drift,
        )

    console.print(table)

    for step in result.steps:
        if step.drift.has_drift:
            console.print(f"  [red]x[/] {step.label}: {step.drift.summary()}")

    restored = all(result.final_states.values())
    status = "[green]all items re-enabled[/]" if restored else "[red]items left disabled[/]"
    console.print(Panel(f"Detached: {status}", title="Teardown"))

    if check and not result.converged:
        console.print("\n[red]FAIL[/] (drift detected)")
        sys.exit(1)


if __name__ == "__main__":
    main()
