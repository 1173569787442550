"""Rich terminal reporter — colour, icons, severity pills."""

from __future__ import annotations

from collections import Counter
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from safemongo.findings.models import ScanResult
from safemongo.findings.severity import severity_icon, severity_style, sort_key


def severity_pill(severity: str) -> Text:
    return Text(f" {severity_icon(severity)} {severity.upper()} ", style=severity_style(severity))


def render(
    result: ScanResult,
    *,
    show_summary: bool = True,
    show_examples: bool = False,
    console: Optional[Console] = None,
) -> None:
    """Print scan results to the terminal using Rich."""
    console = console or Console(stderr=True)

    if not result.findings_by_file:
        console.print()
        console.print("[bold green]✅ No unsafe MongoDB query patterns detected.[/bold green]")
        if show_summary:
            _print_summary(console, result)
        return

    console.print()
    table = Table(
        title="SafeMongo Findings",
        show_lines=True,
        title_style="bold",
        border_style="dim",
    )
    table.add_column("Severity", justify="center", width=12)
    table.add_column("Rule", style="cyan", min_width=20)
    table.add_column("File", style="magenta")
    table.add_column("Line", justify="right", style="green")
    table.add_column("Code", min_width=20, overflow="fold")

    for path, finding in result.iter_findings():
        rule = finding.rule
        rule_cell = Text(rule.name)
        rule_cell.append(f"\n{rule.id}", style="dim")
        if show_examples:
            rule_cell.append(f"\nFix: {rule.remediation}", style="italic")
        table.add_row(
            severity_pill(rule.severity),
            rule_cell,
            # source text is not markup: "$[elem]" and "[/x/]" must render as-is
            Text(path),
            str(finding.line_no),
            Text(finding.matched_text),
        )

    console.print(table)

    if show_summary:
        _print_summary(console, result)

    console.print()
    if result.blocked:
        console.print(
            f"[bold red]❌ FAILED — findings at or above '{result.fail_on}' severity.[/bold red]"
        )
    else:
        console.print(
            "[bold yellow]⚠️  Findings detected but below fail threshold.[/bold yellow]"
        )


def _print_summary(console: Console, result: ScanResult) -> None:
    counts = Counter(f.severity for _, f in result.iter_findings())
    console.print()
    console.print(f"[dim]Files scanned:[/dim]  {result.scanned_files}")
    console.print(f"[dim]Findings:[/dim]       {result.total_findings}")
    for severity in sorted(counts, key=sort_key):
        console.print(f"[dim]  {severity:<8}[/dim]     {counts[severity]}")
    console.print(f"[dim]Blocking:[/dim]       {len(result.blocking_findings)}")
    console.print(f"[dim]Skipped:[/dim]        {len(result.skipped_files)}")
    console.print(f"[dim]Duration:[/dim]       {result.scan_duration_ms:.0f}ms")
