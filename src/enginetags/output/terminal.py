"""Rich terminal reporter."""

from __future__ import annotations

from typing import Dict, Set

from rich.console import Console
from rich.table import Table

from enginetags.rules.registry import RuleSet
from enginetags.scanner.corpus import CorpusReport
from enginetags.tags.aggregator import DetectedMap
from enginetags.tags.models import RunStats


def render_check(results: Dict[str, Set[str]], console: Console) -> None:
    """Print detected keys per checked file list."""
    table = Table(title="Detected", show_lines=True, title_style="bold", border_style="dim")
    table.add_column("File list", style="magenta")
    table.add_column("Detectors", style="cyan")

    for name, keys in results.items():
        table.add_row(name, "\n".join(sorted(keys)) if keys else "[dim]none[/dim]")

    console.print(table)


def render_rules(ruleset: RuleSet, console: Console) -> None:
    table = Table(title=f"{len(ruleset)} detectors", title_style="bold", border_style="dim")
    table.add_column("Detector", style="cyan")
    table.add_column("Patterns", justify="right", style="green")
    for key, patterns in sorted(ruleset.items()):
        table.add_row(key, str(len(patterns)))
    console.print(table)


def render_corpus(report: CorpusReport, console: Console) -> None:
    if report.failures:
        table = Table(title="Corpus failures", show_lines=True, title_style="bold", border_style="dim")
        table.add_column("Kind", style="yellow")
        table.add_column("Source", style="magenta")
        table.add_column("Expected", style="cyan")
        table.add_column("Detail")
        for failure in report.failures:
            table.add_row(failure.kind, failure.source, failure.expected or "-", failure.detail)
        console.print(table)

    console.print()
    console.print(f"[dim]Checked:[/dim]  {report.checked}")
    console.print(f"[dim]Skipped:[/dim]  {report.skipped}")
    console.print(f"[dim]Failures:[/dim] {len(report.failures)}")
    if report.passed:
        console.print("[bold green]✅ Rule corpus passed.[/bold green]")
    else:
        console.print("[bold red]❌ Rule corpus failed.[/bold red]")


def render_summary(detected: DetectedMap, stats: RunStats, console: Console) -> None:
    """Print per-detector package counts after a pipeline run."""
    table = Table(title="Detected tags", title_style="bold", border_style="dim")
    table.add_column("Detector", style="cyan")
    table.add_column("Packages", justify="right", style="green")
    for key, tags in detected.items():
        table.add_row(key, str(len(tags)))
    console.print(table)

    console.print()
    console.print(f"[dim]Packages:[/dim]       {stats.packages}")
    console.print(f"[dim]Depots scanned:[/dim] {stats.depots_scanned}")
    console.print(f"[dim]Depots skipped:[/dim] {stats.depots_skipped}")
    console.print(f"[dim]Cache hits:[/dim]     {stats.cache_hits}")
    console.print(f"[dim]Failed:[/dim]         {len(stats.failed_packages)}")
