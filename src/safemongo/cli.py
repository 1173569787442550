"""SafeMongo CLI — Typer application with scan, rules, explain, details, and init commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from safemongo import __version__
from safemongo.config.schema import OUTPUT_FORMATS, SEVERITIES, SafeMongoConfig

app = typer.Typer(
    name="safemongo",
    help="Detect unsafe MongoDB query patterns in JavaScript / TypeScript code.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)
logger = logging.getLogger("safemongo")


def _setup_logging(level: str) -> None:
    """Route the package logger through Rich on stderr."""
    logger.handlers.clear()
    handler = RichHandler(console=console, show_path=False, show_time=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def _load(config: Optional[str], verbose: bool = False, debug: bool = False) -> SafeMongoConfig:
    """Load config from the working directory, exit 2 on failure."""
    from safemongo.config.loader import load_config
    from safemongo.errors import ConfigError

    try:
        cfg = load_config(Path.cwd(), config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    level = cfg.logging.level
    if verbose:
        level = "INFO"
    if debug:
        level = "DEBUG"
    _setup_logging(level)
    return cfg


def _registry(cfg: SafeMongoConfig):
    from safemongo.errors import ConfigError
    from safemongo.rules.registry import build_registry

    try:
        return build_registry(cfg, Path.cwd())
    except ConfigError as exc:
        console.print(f"[bold red]Rule error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc


# ── scan ──────────────────────────────────────────────────────────────────────


@app.command()
def scan(
    paths: Optional[List[Path]] = typer.Argument(None, help="Files or directories to scan (default: .)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .safemongo.toml"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json | sarif"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write report to file"),
    fail_on: Optional[str] = typer.Option(None, "--fail-on", help="Severity threshold: low | medium | high"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output with timing"),
) -> None:
    """Scan source files for unsafe MongoDB query patterns."""
    from safemongo.output import json_report, sarif, terminal
    from safemongo.scanner.files import scan_paths

    cfg = _load(config, verbose, debug)

    # --- CLI overrides ---
    if format:
        if format not in OUTPUT_FORMATS:
            console.print(f"[bold red]Invalid format:[/bold red] {escape(format)}")
            raise typer.Exit(code=2)
        cfg.output.format = format  # type: ignore[assignment]
    if fail_on:
        if fail_on not in SEVERITIES:
            console.print(f"[bold red]Invalid fail-on level:[/bold red] {escape(fail_on)}")
            raise typer.Exit(code=2)
        cfg.scan.fail_on = fail_on  # type: ignore[assignment]

    registry = _registry(cfg)
    rules = registry.enabled_rules()
    logger.info("Rules enabled: %d of %d", len(rules), len(registry))

    targets = paths or [Path(".")]
    result = scan_paths(targets, rules, cfg, Path.cwd())

    report_text: Optional[str] = None
    if cfg.output.format == "terminal":
        terminal.render(
            result,
            show_summary=cfg.output.show_summary,
            show_examples=cfg.output.show_examples,
        )
    elif cfg.output.format == "json":
        report_text = json_report.render(result)
        print(report_text)
    elif cfg.output.format == "sarif":
        report_text = sarif.render(result)
        print(report_text)

    if output:
        if report_text is None:
            # terminal format: write JSON to the file
            report_text = json_report.render(result)
        Path(output).write_text(report_text, encoding="utf-8")
        logger.info("Report written to %s", output)

    if result.blocked:
        raise typer.Exit(code=1)
    raise typer.Exit(code=0)


# ── rules ─────────────────────────────────────────────────────────────────────


@app.command("rules")
def list_rules(
    severity: Optional[str] = typer.Option(None, "--severity", "-s", help="Only show rules of this severity"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .safemongo.toml"),
) -> None:
    """List detection rules in evaluation order."""
    from safemongo.output.terminal import severity_pill

    cfg = _load(config)
    if severity and severity not in SEVERITIES:
        console.print(f"[bold red]Invalid severity:[/bold red] {escape(severity)}")
        raise typer.Exit(code=2)

    registry = _registry(cfg)
    table = Table(title="SafeMongo Rules", border_style="dim", title_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Severity", justify="center", width=12)
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Category", style="magenta")
    table.add_column("Enabled", justify="center")

    for index, rule in enumerate(registry.all_rules, 1):
        if severity and rule.severity != severity:
            continue
        table.add_row(
            str(index),
            severity_pill(rule.severity),
            Text(rule.id),
            Text(rule.name),
            Text(rule.category),
            "✓" if registry.is_enabled(rule.id) else "✗",
        )

    Console().print(table)


# ── explain ───────────────────────────────────────────────────────────────────


@app.command()
def explain(
    rule_id: str = typer.Argument(..., help="Rule id, e.g. NOSQL_INJECTION_OBJECT"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .safemongo.toml"),
) -> None:
    """Show description, fix guidance and examples for a rule."""
    from safemongo.findings.models import Finding
    from safemongo.output.details import print_details

    cfg = _load(config)
    registry = _registry(cfg)
    rule = registry.get(rule_id) or registry.get(rule_id.upper())
    if rule is None:
        console.print(f"[bold red]Unknown rule:[/bold red] {escape(rule_id)}")
        raise typer.Exit(code=2)

    example = rule.unsafe_example.split("\n", 1)[0]
    print_details(Finding(rule=rule, line_no=1, matched_text=example), console=Console())


# ── details ───────────────────────────────────────────────────────────────────


@app.command()
def details(
    file: Path = typer.Argument(..., help="Source file"),
    line: int = typer.Argument(..., min=1, help="1-based line number"),
    html: Optional[Path] = typer.Option(None, "--html", help="Also write an HTML report to this path"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .safemongo.toml"),
) -> None:
    """Scan FILE and show details for every finding on LINE."""
    from safemongo.output.details import print_details, render_html
    from safemongo.scanner.engine import scan as run_scan
    from safemongo.scanner.files import read_source

    cfg = _load(config)
    text, reason = read_source(file, cfg.scan.max_file_size_kb * 1024)
    if text is None:
        console.print(f"[bold red]Cannot scan {escape(str(file))}:[/bold red] {escape(str(reason))}")
        raise typer.Exit(code=2)

    rules = _registry(cfg).enabled_rules()
    findings = [
        f for f in run_scan(text.replace("\r\n", "\n"), rules, str(file))
        if f.line_no == line
    ]
    if not findings:
        console.print(f"[green]No findings on {escape(str(file))}:{line}.[/green]")
        raise typer.Exit(code=0)

    out = Console()
    for finding in findings:
        print_details(finding, source_id=str(file), console=out)
    if html:
        html.write_text(
            "\n".join(render_html(f, source_id=str(file)) for f in findings),
            encoding="utf-8",
        )
        logger.info("HTML report written to %s", html)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .safemongo.toml in the current directory."""
    from safemongo.config.defaults import DEFAULT_TOML
    from safemongo.config.loader import CONFIG_FILENAME

    config_path = Path.cwd() / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {escape(str(config_path))}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {escape(str(config_path))}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"safemongo {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """SafeMongo — Detect unsafe MongoDB query patterns."""
