"""
portweave command line.

    portweave check BINDINGS.json        validate a binding list, report cycles
    portweave simulate SCENARIO.json     replay port updates against bindings and an ORS
    portweave eval EXPR --var name=json  evaluate one binding expression
"""

from __future__ import annotations

import json
import logging
import platform
from collections.abc import Callable
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from portweave._version import __version__
from portweave.config import PortweaveConfig, load_config
from portweave.core.errors import PortweaveError
from portweave.core.expression_lang import evaluate_source, validate_syntax
from portweave.core.paths import create_widget_port_path
from portweave.runtime.binding_engine import ReactiveBindingEngine
from portweave.runtime.binding_processor import DataBindingProcessor
from portweave.runtime.scheduler import ManualScheduler
from portweave.specs.binding import PropagationEvent, ReactiveBindingSpec
from portweave.specs.data_binding import DataBindingDirection, DataBindingSpec
from portweave.specs.ors import ORS

app = typer.Typer(
    help="Reactive port bindings for generated UI widgets",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"portweave {__version__} (Python {platform.python_version()})")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-V", help="Enable debug logging")
    ] = False,
) -> None:
    """portweave CLI main callback for global options."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text())
    except OSError as e:
        console.print(f"[red]Cannot read {path}:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {path}:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e


def _load_spec(data: Any, source: Path) -> ReactiveBindingSpec:
    if isinstance(data, list):
        data = {"bindings": data}
    try:
        return ReactiveBindingSpec.model_validate(data)
    except ValidationError as e:
        console.print(f"[red]Invalid binding spec in {source}:[/red]\n{escape(str(e))}")
        raise typer.Exit(code=1) from e


def _build_engine(
    spec: ReactiveBindingSpec, config_path: Path | None, max_depth: int | None
) -> tuple[ReactiveBindingEngine, ManualScheduler, PortweaveConfig]:
    scheduler = ManualScheduler()
    try:
        config = load_config(config_path, max_propagation_depth=max_depth)
        engine = ReactiveBindingEngine(spec, config=config.engine, scheduler=scheduler)
    except PortweaveError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(code=1) from e
    return engine, scheduler, config


ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="Path to portweave.toml")
]
MaxDepthOption = Annotated[
    int | None, typer.Option("--max-depth", help="Override max propagation depth")
]


@app.command()
def check(
    bindings_file: Annotated[Path, typer.Argument(help="Binding spec JSON file")],
    config_path: ConfigOption = None,
    max_depth: MaxDepthOption = None,
) -> None:
    """Validate a binding spec and report cycles and bad expressions."""
    spec = _load_spec(_read_json(bindings_file), bindings_file)
    engine, _, _ = _build_engine(spec, config_path, max_depth)

    table = Table(title=f"Bindings ({len(spec.bindings)})")
    table.add_column("ID", style="cyan")
    table.add_column("Source")
    table.add_column("Target")
    table.add_column("Mechanism")
    table.add_column("Mode")
    table.add_column("Expression")

    problems = 0
    for binding in spec.bindings:
        source = binding.relationship.expression or ""
        expression = escape(source)
        if source:
            ok, error = validate_syntax(source)
            if not ok:
                problems += 1
                expression = f"[red]{expression}  ({escape(error or '')})[/red]"
        table.add_row(
            binding.id if binding.enabled else f"[dim]{binding.id} (disabled)[/dim]",
            binding.source,
            binding.target,
            binding.mechanism.value,
            binding.update_mode.value,
            expression,
        )
    console.print(table)

    cycles = engine.graph.find_cycles()
    for cycle in cycles:
        console.print(f"[yellow]Cycle:[/yellow] {' -> '.join(cycle + cycle[:1])}")

    engine.dispose()
    if problems:
        console.print(f"[red]{problems} binding(s) with invalid expressions[/red]")
        raise typer.Exit(code=1)
    console.print(
        f"[green]OK[/green] {engine.graph.edge_count} enabled binding(s), {len(cycles)} cycle(s)"
    )


def _run_step(
    engine: ReactiveBindingEngine,
    scheduler: ManualScheduler,
    step: dict[str, Any],
    write_back: Callable[[str, Any], None],
) -> None:
    if "init" in step:
        engine.init_port(step["init"], step.get("value"))
    elif "update" in step:
        engine.update_port(step["update"], step.get("value"))
        write_back(step["update"], step.get("value"))
    elif "advance" in step:
        scheduler.advance(int(step["advance"]))
    elif "confirm" in step:
        engine.confirm_binding(step["confirm"])
    elif "confirmAll" in step:
        engine.confirm_all_bindings()
    elif "cancel" in step:
        engine.cancel_binding(step["cancel"])
    elif "flush" in step:
        engine.flush()
    else:
        console.print(f"[yellow]Skipping unknown step:[/yellow] {escape(repr(step))}")


def _load_data_bindings(data: Any, source: Path) -> dict[str, DataBindingSpec]:
    """{"widgetId": [DataBindingSpec, ...]} -> {"widgetId.portId": DataBindingSpec}."""
    if not isinstance(data, dict):
        console.print(f"[red]dataBindings must map widget ids to lists in {source}[/red]")
        raise typer.Exit(code=1)
    try:
        return {
            create_widget_port_path(widget_id, spec.port_id): spec
            for widget_id, items in data.items()
            for spec in (DataBindingSpec.model_validate(item) for item in items)
        }
    except ValidationError as e:
        console.print(f"[red]Invalid data binding in {source}:[/red]\n{escape(str(e))}")
        raise typer.Exit(code=1) from e


def _load_ors(data: Any, source: Path) -> ORS:
    try:
        return ORS.model_validate(data)
    except ValidationError as e:
        console.print(f"[red]Invalid ORS in {source}:[/red]\n{escape(str(e))}")
        raise typer.Exit(code=1) from e


_SCENARIO_KEYS = ("steps", "ors", "dataBindings")


@app.command()
def simulate(
    scenario_file: Annotated[Path, typer.Argument(help="Scenario JSON file")],
    config_path: ConfigOption = None,
    max_depth: MaxDepthOption = None,
) -> None:
    """
    Replay a scenario of port updates and print the resulting events.

    The scenario is {"bindings": [...], "steps": [...]}, optionally with an
    "ors" graph and "dataBindings" ({"widgetId": [DataBindingSpec, ...]}).
    Data-bound ports are seeded from the ORS and written back to it when
    they change. Each step is one of {"init": port, "value": v},
    {"update": port, "value": v}, {"advance": ms}, {"confirm": id},
    {"confirmAll": true}, {"cancel": id} or {"flush": true}. Debounce timers
    run on a virtual clock moved only by "advance".
    """
    data = _read_json(scenario_file)
    if not isinstance(data, dict):
        console.print(f"[red]Scenario must be a JSON object:[/red] {scenario_file}")
        raise typer.Exit(code=1)

    spec = _load_spec({k: v for k, v in data.items() if k not in _SCENARIO_KEYS}, scenario_file)
    engine, scheduler, config = _build_engine(spec, config_path, max_depth)

    processor: DataBindingProcessor | None = None
    port_bindings: dict[str, DataBindingSpec] = {}
    if "ors" in data:
        processor = DataBindingProcessor(
            _load_ors(data["ors"], scenario_file), config=config.processor
        )
        port_bindings = _load_data_bindings(data.get("dataBindings", {}), scenario_file)

    events: list[PropagationEvent] = []
    errors: list[tuple[str, str]] = []

    def write_back(path: str, value: Any) -> None:
        binding = port_bindings.get(path)
        if processor is None or binding is None or binding.direction == DataBindingDirection.IN:
            return
        result = processor.update_value(binding, value)
        if not result.success:
            errors.append((path, result.error or "update failed"))

    def on_propagate(batch: list[PropagationEvent]) -> None:
        events.extend(batch)
        for event in batch:
            write_back(event.target, event.value)

    engine.set_on_propagate(on_propagate)
    engine.set_on_validation_error(lambda target, message: errors.append((target, message)))

    if processor is not None:
        for path, binding in port_bindings.items():
            if binding.direction != DataBindingDirection.OUT:
                engine.init_port(path, processor.get_initial_value(binding))

    for step in data.get("steps", []):
        _run_step(engine, scheduler, step, write_back)

    event_table = Table(title="Propagation events")
    event_table.add_column("#", justify="right")
    event_table.add_column("Binding", style="cyan")
    event_table.add_column("Source")
    event_table.add_column("Target")
    event_table.add_column("Value")
    for i, event in enumerate(events, 1):
        event_table.add_row(
            str(i),
            escape(event.binding_id),
            escape(event.source),
            escape(event.target),
            escape(json.dumps(event.value)),
        )
    console.print(event_table)

    for target, message in errors:
        console.print(f"[red]{target}:[/red] {escape(message)}")

    port_table = Table(title="Final port values")
    port_table.add_column("Port", style="cyan")
    port_table.add_column("Value")
    for path, value in sorted(engine.get_all_port_values().items()):
        port_table.add_row(path, escape(json.dumps(value)))
    console.print(port_table)

    if processor is not None:
        ors_table = Table(title="ORS runtime values")
        ors_table.add_column("Attribute", style="cyan")
        ors_table.add_column("Value")
        for path, value in sorted(processor.get_all_values().items()):
            ors_table.add_row(path, escape(json.dumps(value)))
        console.print(ors_table)
        processor.dispose()

    pending = engine.get_pending_confirm_bindings()
    if pending:
        console.print(f"[yellow]Pending confirmation:[/yellow] {', '.join(pending)}")

    engine.dispose()


def _parse_var(raw: str) -> tuple[str, Any]:
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise typer.BadParameter(f"Expected name=value, got {raw!r}")
    try:
        return name, json.loads(value)
    except json.JSONDecodeError:
        return name, value


@app.command("eval")
def eval_expression(
    expression: Annotated[str, typer.Argument(help="Expression to evaluate")],
    var: Annotated[
        list[str] | None,
        typer.Option("--var", help="Variable as name=json (repeatable)"),
    ] = None,
) -> None:
    """Evaluate an expression with the binding expression language."""
    variables = dict(_parse_var(raw) for raw in var or [])
    try:
        result = evaluate_source(expression, variables)
    except PortweaveError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(code=1) from e
    console.print(json.dumps(result), markup=False, highlight=False)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
