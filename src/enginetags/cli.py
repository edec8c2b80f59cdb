"""enginetags CLI — Typer application with check, verify, rules, and init commands."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger
from rich.console import Console

from enginetags import __version__

app = typer.Typer(
    name="enginetags",
    help="Detect game engines and technologies from depot file lists.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def _load_config(config: Optional[str]):
    """Load config from the working directory, exit 2 on failure."""
    from enginetags.config.loader import ConfigError, load_config

    try:
        return load_config(Path.cwd(), config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc


def _load_ruleset(path: Path):
    """Parse the rule file, exit 2 on failure."""
    from enginetags.rules.models import RuleSyntaxError
    from enginetags.rules.registry import load_rules

    try:
        return load_rules(path)
    except RuleSyntaxError as exc:
        console.print(f"[bold red]Rule error:[/bold red] {path}: {exc}")
        raise typer.Exit(code=2) from exc


# ── check ─────────────────────────────────────────────────────────────────────


@app.command()
def check(
    filelists: List[Path] = typer.Argument(..., help="Files with one depot path per line"),
    rules: Optional[Path] = typer.Option(None, "--rules", "-r", help="Rule file (default from config)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .enginetags.toml"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Classify local file lists against the rule set."""
    from enginetags.output import json_report, terminal
    from enginetags.scanner.engine import run

    _configure_logging(verbose)
    cfg = _load_config(config)

    if format:
        if format not in ("terminal", "json"):
            console.print(f"[bold red]Invalid format:[/bold red] {format}")
            raise typer.Exit(code=2)
        cfg.output.format = format  # type: ignore[assignment]

    ruleset = _load_ruleset(rules or Path(cfg.rules.path))
    if verbose:
        console.print(f"[dim]Detectors loaded: {len(ruleset)}[/dim]")

    results = {}
    for path in filelists:
        if not path.is_file():
            console.print(f"[bold red]File list not found:[/bold red] {path}")
            raise typer.Exit(code=2)
        lines = [ln.strip() for ln in path.read_text(encoding="utf-8-sig").splitlines() if ln.strip()]
        results[path.name] = run(lines, ruleset)

    if cfg.output.format == "json":
        print(json_report.render_check(results))
    else:
        terminal.render_check(results, console)


# ── verify ────────────────────────────────────────────────────────────────────


@app.command()
def verify(
    rules: Optional[Path] = typer.Option(None, "--rules", "-r", help="Rule file (default from config)"),
    corpus: Optional[Path] = typer.Option(None, "--corpus", help="Corpus directory with filelists/ and types/"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .enginetags.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Run the rule test corpus; exit 1 on any failure."""
    from enginetags.output import terminal
    from enginetags.scanner.corpus import verify_corpus

    _configure_logging(verbose)
    cfg = _load_config(config)
    rules_path = rules or Path(cfg.rules.path)
    ruleset = _load_ruleset(rules_path)

    corpus_dir = corpus or (Path(cfg.rules.corpus) if cfg.rules.corpus else rules_path.parent / "tests")
    if not corpus_dir.is_dir():
        console.print(f"[bold red]Corpus directory not found:[/bold red] {corpus_dir}")
        raise typer.Exit(code=2)

    report = verify_corpus(corpus_dir, ruleset)
    terminal.render_corpus(report, console)
    if not report.passed:
        raise typer.Exit(code=1)


# ── rules ─────────────────────────────────────────────────────────────────────


@app.command("rules")
def list_rules(
    rules: Optional[Path] = typer.Option(None, "--rules", "-r", help="Rule file (default from config)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .enginetags.toml"),
) -> None:
    """List detectors and how many patterns each has."""
    from enginetags.output import terminal

    cfg = _load_config(config)
    ruleset = _load_ruleset(rules or Path(cfg.rules.path))
    terminal.render_rules(ruleset, Console())


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .enginetags.toml in the working directory."""
    from enginetags.config.defaults import DEFAULT_TOML
    from enginetags.config.loader import CONFIG_FILENAME

    config_path = Path.cwd() / CONFIG_FILENAME
    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"enginetags {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """enginetags — detect game engines from depot file lists."""
