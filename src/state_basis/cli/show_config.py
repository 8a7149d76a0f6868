"""Config CLI command -- show the effective engine configuration."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..exceptions import BasisError
from . import app
from ._common import console, resolve_config


@app.command("config")
def show_config(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML config file"),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """
    Show the configuration the engine would run with.

    Merges defaults, ./state-basis.toml, --config and STATE_BASIS_* variables.
    """
    try:
        engine_config = resolve_config(config)
    except BasisError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    values = engine_config.to_dict()
    if json_output:
        print(json.dumps(values, indent=2))
        return

    table = Table(show_header=True)
    table.add_column("Setting", min_width=24)
    table.add_column("Value", justify="right")
    for key, value in values.items():
        table.add_row(key, str(value))
    console.print(table)
