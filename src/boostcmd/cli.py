"""CLI for running command scripts against a model registry."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from boostcmd.config import DispatcherConfig
from boostcmd.dispatcher import ARITY, OPTIONS, Dispatcher, Request
from boostcmd.errors import BoostCommandError
from boostcmd.logs import configure_logging
from boostcmd.marshal import to_host
from boostcmd.model import BoostModel
from boostcmd.properties import get_property
from boostcmd.types import BoostType, Method, Property

app = typer.Typer(
    name="boostcmd",
    help="Drive boosted decision-tree models through handle-based commands.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


@app.command()
def run(
    script: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, help="JSON-lines command script."),
    ],
    keep_going: Annotated[
        bool,
        typer.Option("--keep-going", "-k", help="Continue after a failed command."),
    ] = False,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Log level (overrides BOOSTCMD_LOG_LEVEL)."),
    ] = None,
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Emit logs as JSON."),
    ] = False,
) -> None:
    """Execute a command script, printing one JSON result per command.

    Each non-empty line is an object such as
    {"handle": 1, "method": "get", "args": ["MaxDepth"]}. Lines starting with
    '#' are skipped.
    """
    try:
        config = DispatcherConfig.from_env(log_level=log_level, json_logs=json_logs or None)
    except ValidationError as e:
        err_console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(2) from None

    configure_logging(config.log_level, json_output=config.json_logs)
    dispatcher = Dispatcher(config=config)
    failures = 0

    for lineno, line in enumerate(script.read_text().splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            request = Request.model_validate_json(line)
            result = dispatcher.dispatch(request)
        except (ValidationError, BoostCommandError) as e:
            failures += 1
            err_console.print(f"[red]line {lineno}: {type(e).__name__}: {e}[/red]")
            if not keep_going:
                raise typer.Exit(1) from None
            continue
        typer.echo(json.dumps({"line": lineno, "result": to_host(result)}))

    if failures:
        err_console.print(f"[yellow]{failures} command(s) failed[/yellow]")
        raise typer.Exit(1)


@app.command(name="methods")
def list_methods() -> None:
    """List supported methods with their call shapes and options."""
    table = Table(title="Methods", show_header=True, header_style="bold")
    table.add_column("Method", style="cyan", no_wrap=True)
    table.add_column("Shape")
    table.add_column("Options", style="green")

    for method in Method:
        table.add_row(method.value, ARITY[method].describe(), ", ".join(OPTIONS.get(method, ())) or "-")

    console.print(table)


@app.command(name="properties")
def list_properties() -> None:
    """List hyperparameters reachable through get/set."""
    table = Table(title="Properties", show_header=True, header_style="bold")
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Default")
    table.add_column("Values")

    model = BoostModel()
    for prop in Property:
        values = " | ".join(t.value for t in BoostType) if prop is Property.BOOST_TYPE else ""
        table.add_row(prop.value, json.dumps(to_host(get_property(model, prop))), values)

    console.print(table)


if __name__ == "__main__":
    app()
