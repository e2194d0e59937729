from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from shaker.orchestrator import RunSummary


def _format_mb(value: Optional[int]) -> str:
    if not value:
        return "N/A"
    return f"{value / (1024 * 1024):.2f}"


def print_summary(summary: RunSummary, console: Optional[Console] = None) -> None:
    """
    Render a run summary as rich tables: one row per section, then the phases.
    """
    console = console or Console()

    if not summary.sections:
        console.print("[yellow]No sections rendered.[/yellow]")
    else:
        table = Table(
            title=f"Rendered sections [dim]({summary.lang}, cache {summary.cache})[/dim]",
            box=box.ROUNDED,
            caption=(
                f"{summary.inserted} records ingested, {len(summary.skipped)} skipped, "
                f"{summary.documents} documents written"
            ),
        )
        table.add_column("Ordinal", style="cyan", no_wrap=True)
        table.add_column("Title", style="bold")
        table.add_column("Directory", style="magenta")
        table.add_column("Documents", justify="right", style="green")
        for section in summary.sections:
            table.add_row(section.ordinal, section.title, section.slug, str(section.documents))
        console.print(table)

    if summary.phases:
        phases = Table(title="Phases", box=box.ROUNDED)
        phases.add_column("Phase", style="cyan")
        phases.add_column("Duration (s)", justify="right", style="green")
        phases.add_column("Peak Memory (MB)", justify="right", style="yellow")
        phases.add_column("CPU %", justify="right", style="red")
        for name, stats in summary.phases.items():
            cpu = stats.get("cpu_percent")
            phases.add_row(
                name,
                f"{stats.get('duration_seconds', 0.0):.3f}",
                _format_mb(stats.get("peak_rss_bytes")),
                f"{cpu:.1f}" if cpu is not None else "N/A",
            )
        console.print(phases)


__all__ = ["print_summary"]
