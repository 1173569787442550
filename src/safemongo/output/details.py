"""Detail report for a single finding — rich panels, text or HTML export."""

from __future__ import annotations

import io
from typing import Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text

from safemongo.findings.models import Finding
from safemongo.findings.severity import severity_color, severity_icon

_BAD_BORDER = "#FF4D4F"
_GOOD_BORDER = "#52C41A"


def _code(snippet: str) -> Syntax:
    return Syntax(snippet, "javascript", theme="ansi_dark", word_wrap=True)


def build(finding: Finding, source_id: Optional[str] = None) -> Group:
    """Assemble the renderable for *finding*."""
    rule = finding.rule
    header = Text()
    header.append(f"{rule.name} ", style="bold")
    header.append(
        f" {severity_icon(rule.severity)} {rule.severity.upper()} ",
        style=f"bold white on {severity_color(rule.severity)}",
    )

    location = f"line {finding.line_no}"
    if source_id:
        location = f"{source_id}:{finding.line_no}"

    parts = [
        header,
        Text(rule.description),
        Panel(
            Text(finding.matched_text),
            title=f"Line Found ({location})",
            border_style=_BAD_BORDER,
        ),
        Panel(Text(rule.remediation), title="Suggestion", border_style="cyan"),
        Panel(_code(rule.unsafe_example), title="Vulnerable Example", border_style=_BAD_BORDER),
        Panel(_code(rule.safe_example), title="Safe Example", border_style=_GOOD_BORDER),
        Text.assemble(("Documentation: ", "dim"), (rule.reference_url, f"link {rule.reference_url}")),
    ]
    return Group(*parts)


def _recording_console(width: int) -> Console:
    return Console(record=True, width=width, file=io.StringIO(), color_system="truecolor")


def render_text(finding: Finding, source_id: Optional[str] = None, width: int = 100) -> str:
    """Plain-text report (no ANSI codes)."""
    console = _recording_console(width)
    console.print(build(finding, source_id))
    return console.export_text()


def render_html(finding: Finding, source_id: Optional[str] = None, width: int = 100) -> str:
    """Standalone HTML page, for webview-style detail panes."""
    console = _recording_console(width)
    console.print(build(finding, source_id))
    return console.export_html(inline_styles=True)


def print_details(
    finding: Finding,
    source_id: Optional[str] = None,
    console: Optional[Console] = None,
) -> None:
    """Print the report straight to a terminal console."""
    (console or Console()).print(build(finding, source_id))
