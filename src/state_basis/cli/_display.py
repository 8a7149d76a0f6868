"""Rich rendering of engine reports."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..insights.models import BasisReport


def _score_style(score: float) -> str:
    return "green" if score > 85 else "red"


def render_report(report: BasisReport, console: Console) -> None:
    console.print()
    console.print(f"[bold cyan]STATE BASIS REPORT[/bold cyan] -- tick {report.tick}")
    console.print()

    if report.issues:
        table = Table(show_header=True, title="Top issues", title_justify="left")
        table.add_column("#", justify="right")
        table.add_column("Label", min_width=24)
        table.add_column("Metric")
        table.add_column("Score", justify="right")
        table.add_column("Reason")
        for rank, issue in enumerate(report.issues, start=1):
            table.add_row(
                str(rank),
                escape(issue.label),
                issue.metric.value,
                f"{issue.score:.3f}",
                escape(issue.reason),
            )
        console.print(table)
    else:
        console.print("[green]No ranked issues.[/green]")

    if report.redundant:
        console.print()
        console.print("[bold red]Redundant signals[/bold red]")
        for label in report.redundant:
            console.print(f"  {escape(label)}")

    if report.violations:
        table = Table(show_header=True, title="Violations", title_justify="left")
        table.add_column("Cause", min_width=24)
        table.add_column("Type")
        table.add_column("Target")
        table.add_column("Similarity", justify="right")
        for cause, records in sorted(report.violations.items()):
            for record in records:
                similarity = "--" if record.similarity is None else f"{record.similarity:.0%}"
                table.add_row(escape(cause), record.type.value, escape(record.target), similarity)
        console.print()
        console.print(table)

    health = report.health
    console.print()
    console.print(
        f"[bold]Architectural health:[/bold] "
        f"[{_score_style(health.score)}]{health.score:.1f}%[/{_score_style(health.score)}] "
        f"[dim](state distribution {health.system_rank}/{health.total})[/dim]"
    )
    for index, cluster in enumerate(health.clusters, start=1):
        console.print(f"  {index}. " + escape(" <-> ".join(cluster)))

    metrics = report.metrics
    console.print(
        f"[dim]{metrics.analysis_passes} analysis pass(es), last took "
        f"{metrics.last_analysis_ms:.2f}ms over {metrics.comparison_count} comparison(s)[/dim]"
    )
