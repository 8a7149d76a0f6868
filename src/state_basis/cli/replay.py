"""Replay CLI command -- feed a recorded trace through the engine."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..engine import BasisEngine
from ..exceptions import BasisError
from ..temporal.scheduler import ManualScheduler
from . import app
from ._common import console, resolve_config
from ._display import render_report
from .trace import ReplayClock, parse_trace, replay as run_replay


@app.command()
def replay(
    trace: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON-lines trace file"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML config file"),
    window: Optional[int] = typer.Option(None, "--window", "-w", help="Ring buffer size in ticks", min=2),
    similarity: Optional[float] = typer.Option(
        None, "--similarity", help="Similarity threshold for relationships", min=0.0, max=1.0
    ),
    top: Optional[int] = typer.Option(None, "--top", "-n", help="Maximum ranked issues", min=1),
    threshold: float = typer.Option(
        0.5, "--cluster-threshold", help="Similarity threshold for health clusters", min=0.0, max=1.0
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """
    Replay a recorded pulse trace and print the diagnostic report.

    [bold cyan]Examples:[/bold cyan]

      state-basis replay session.jsonl

      state-basis replay session.jsonl --top 5 --json
    """
    try:
        engine_config = resolve_config(config, window, similarity, top)
        ops = parse_trace(trace)
    except BasisError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    clock = ReplayClock()
    scheduler = ManualScheduler()
    engine = BasisEngine(engine_config, scheduler=scheduler, clock=clock)

    try:
        stats = run_replay(ops, engine, scheduler, clock)
    except BasisError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    report = engine.generate_report(threshold)

    if json_output:
        payload = report.to_dict()
        payload["replay"] = {
            "operations": stats.operations,
            "pulses": stats.pulses,
            "blocked": stats.blocked,
            "ticks": stats.ticks,
        }
        print(json.dumps(payload, indent=2))
        return

    render_report(report, console)
    if stats.blocked:
        console.print(f"[yellow]{stats.blocked} pulse(s) blocked by the circuit breaker[/yellow]")
