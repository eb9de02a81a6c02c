"""CLI for the grid-dialogs submission pipeline."""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any

import typer
from jsonschema.exceptions import SchemaError
from rich.console import Console
from rich.table import Table

from grid_dialogs import __version__
from grid_dialogs.config import (
    GlobalConfig,
    get_config_path,
    load_global_config,
    save_global_config,
)
from grid_dialogs.core.models import DialogMode, NormalizedErrors
from grid_dialogs.dialogs import CrudHandlers, DialogContainer
from grid_dialogs.forms import DictFormHandle, SchemaFormHandle
from grid_dialogs.io import read_error_values, read_json, write_normalized_errors
from grid_dialogs.logs import configure_logging
from grid_dialogs.normalize import ErrorNormalizer

app = typer.Typer(
    name="grid-dialogs",
    help="Form adapter and dialog submission pipeline for data grids.",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"grid-dialogs version {__version__}")
        raise typer.Exit()


def _load_config() -> GlobalConfig:
    try:
        return load_global_config()
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Override the configured log level"),
    ] = None,
) -> None:
    """grid-dialogs: Form adapter and dialog submission pipeline."""
    try:
        config = load_global_config()
    except ValueError as e:
        # Keep `init --force` usable on a broken config file
        console.print(f"[yellow]Warning:[/yellow] {e}; using defaults")
        config = GlobalConfig()
    configure_logging(log_level or config.log_level, config.log_format)


def _errors_table(errors: NormalizedErrors, title: str = "Errors") -> Table:
    table = Table(title=title)
    table.add_column("Field", style="cyan")
    table.add_column("Message")
    for field, message in errors.items():
        table.add_row(field, message)
    return table


@app.command()
def normalize(
    path: Annotated[
        Path | None,
        typer.Argument(help="JSON file holding one error value"),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the normalized errors as JSON"),
    ] = False,
    input_path: Annotated[
        Path | None,
        typer.Option("--in", "-i", help="Input JSONL file of error values"),
    ] = None,
    output_path: Annotated[
        Path | None,
        typer.Option("--out", "-o", help="Output JSONL file of normalized errors"),
    ] = None,
) -> None:
    """Normalize validation error values into field -> message maps.

    Examples:
        grid-dialogs normalize error.json
        grid-dialogs normalize error.json --json
        grid-dialogs normalize --in errors.jsonl --out normalized.jsonl
    """
    submission = _load_config().submission
    normalizer = ErrorNormalizer(
        error_key=submission.error_key,
        fallback_message=submission.fallback_message,
    )

    if input_path is not None:
        if output_path is None:
            console.print("[red]Error:[/red] --out is required with --in")
            raise typer.Exit(1)
        if not input_path.exists():
            console.print(f"[red]Error:[/red] Input file not found: {input_path}")
            raise typer.Exit(1)
        try:
            count = write_normalized_errors(
                output_path,
                (normalizer.normalize(value) for value in read_error_values(input_path)),
            )
        except ValueError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
        console.print(f"[green]✓[/green] Normalized {count} error values into {output_path}")
        return

    if path is None:
        console.print("[red]Error:[/red] Provide an error file or --in/--out")
        raise typer.Exit(1)
    if not path.exists():
        console.print(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(1)

    try:
        value = read_json(path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    errors = normalizer.normalize(value)
    if as_json:
        typer.echo(json.dumps(errors, ensure_ascii=False))
        return
    console.print(_errors_table(errors, title=f"Normalized errors ({path.name})"))


def _echo_handlers(mode: str, succeed: bool, calls: list[dict[str, Any]]) -> CrudHandlers:
    def record(name: str) -> Any:
        def handler(*args: Any) -> bool:
            calls.append({"handler": name, "args": list(args)})
            return succeed

        return handler

    custom = {}
    if mode not in {m.value for m in DialogMode}:
        custom[mode] = record(mode)
    return CrudHandlers(
        on_create=record("on_create"),
        on_update=record("on_update"),
        on_delete=record("on_delete"),
        custom=custom,
    )


@app.command()
def submit(
    mode: Annotated[
        str,
        typer.Option("--mode", "-m", help="Dialog mode: create, edit, view, delete or a custom mode"),
    ],
    values_path: Annotated[
        Path,
        typer.Option("--values", help="JSON file with the form values"),
    ],
    record_path: Annotated[
        Path | None,
        typer.Option("--record", "-r", help="JSON file with the active record"),
    ] = None,
    schema_path: Annotated[
        Path | None,
        typer.Option("--schema", "-s", help="JSON schema the form values are validated against"),
    ] = None,
    reject: Annotated[
        bool,
        typer.Option("--reject", help="Make the echo handlers report failure"),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the submission outcome as JSON"),
    ] = False,
) -> None:
    """Dry-run one dialog submission through the full pipeline.

    The form is built from the values file (validated against the schema
    when given) and the CRUD handlers only echo their arguments.
    """
    for label, file_path in (("Values", values_path), ("Record", record_path), ("Schema", schema_path)):
        if file_path is not None and not file_path.exists():
            console.print(f"[red]Error:[/red] {label} file not found: {file_path}")
            raise typer.Exit(1)

    try:
        values = read_json(values_path)
        record = read_json(record_path) if record_path else None
        schema = read_json(schema_path) if schema_path else None
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not isinstance(values, dict):
        console.print("[red]Error:[/red] Values file must contain a JSON object")
        raise typer.Exit(1)

    try:
        handle = SchemaFormHandle(schema, values) if schema is not None else DictFormHandle(values)
    except SchemaError as e:
        console.print(f"[red]Invalid schema:[/red] {e.message}")
        raise typer.Exit(1)

    calls: list[dict[str, Any]] = []
    container = DialogContainer(
        handlers=_echo_handlers(mode, not reject, calls),
        config=_load_config().submission,
    )
    machine = container.open(mode, record)
    container.mount_form(handle)

    success = asyncio.run(container.confirm())
    outcome = machine.outcome

    if as_json:
        payload = {
            "mode": machine.mode,
            "success": success,
            "state": machine.state.value,
            "outcome": outcome.model_dump(mode="json") if outcome else None,
            "calls": calls,
        }
        typer.echo(json.dumps(payload, ensure_ascii=False, default=str))
    elif outcome is None:
        console.print(f"[yellow]Warning:[/yellow] {machine.mode} dialogs are read-only; nothing submitted")
    else:
        color = "green" if success else "red"
        console.print(f"[bold]{machine.mode}[/bold]: [{color}]{machine.state.value}[/{color}]")
        for call in calls:
            console.print(f"  {call['handler']}({', '.join(json.dumps(a, default=str) for a in call['args'])})")
        if outcome.errors:
            console.print(_errors_table(outcome.errors))

    if not success:
        raise typer.Exit(1)


@app.command()
def init(
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite an existing config file",
    ),
) -> None:
    """Write the default global configuration.

    Creates:
      ~/.config/grid-dialogs/config.yaml  (or $GRID_DIALOGS_HOME/config.yaml)
    """
    config_path = get_config_path()
    if config_path.exists() and not force:
        console.print(f"[yellow]Warning:[/yellow] Config already exists at {config_path}")
        console.print("Use --force to overwrite")
        raise typer.Exit(1)

    save_global_config(GlobalConfig(), config_path)
    console.print(f"[green]✓[/green] Created config at {config_path}")


if __name__ == "__main__":
    app()
