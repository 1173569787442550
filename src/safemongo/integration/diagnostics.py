"""Diagnostics publishing for editor integrations.

The engine is stateless; everything an editor integration has to remember
(published markers per document, which finding produced which marker, the
detail report currently on screen) lives in the objects below. They are
created on activation and must be disposed on teardown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from safemongo.findings.models import Finding
from safemongo.findings.severity import diagnostic_level, severity_icon
from safemongo.rules.models import Rule
from safemongo.scanner.engine import is_catalog_source, scan

logger = logging.getLogger(__name__)

DIAGNOSTIC_SOURCE = "SafeMongo"

SUPPORTED_LANGUAGES = frozenset(
    {"javascript", "typescript", "javascriptreact", "typescriptreact"}
)

DiagnosticKey = Tuple[str, int, str]  # (source_id, line_no, rule_id)


class DisposedError(RuntimeError):
    """Raised when a disposed collection or session is used."""


@dataclass(frozen=True)
class Range:
    """Zero-based, end-exclusive span on a single line."""

    line: int
    start_char: int
    end_char: int


@dataclass(frozen=True)
class Diagnostic:
    source_id: str
    range: Range
    message: str
    level: str  # error | warning | information | hint
    code: str
    code_target: str
    source: str = DIAGNOSTIC_SOURCE
    related: Tuple[str, ...] = ()

    @property
    def key(self) -> DiagnosticKey:
        return (self.source_id, self.range.line + 1, self.code)


def to_diagnostic(source_id: str, finding: Finding, line_text: str) -> Diagnostic:
    """Build the marker for *finding* spanning the whole source line."""
    rule = finding.rule
    line = finding.line_no - 1
    return Diagnostic(
        source_id=source_id,
        range=Range(line=line, start_char=0, end_char=len(line_text)),
        message=f"{severity_icon(rule.severity)} {rule.name}: {rule.description}",
        level=diagnostic_level(rule.severity),
        code=rule.id,
        code_target=rule.reference_url,
        related=(
            f"Suggestion: {rule.remediation}",
            f"Documentation: {rule.reference_url}",
        ),
    )


@dataclass
class _Published:
    version: Optional[int]
    diagnostics: List[Diagnostic] = field(default_factory=list)


class DiagnosticCollection:
    """Markers per source id plus the diagnostic → finding side table."""

    def __init__(self, name: str = "safemongo") -> None:
        self.name = name
        self._published: Dict[str, _Published] = {}
        self._findings: Dict[DiagnosticKey, Finding] = {}
        self._disposed = False

    def _check_alive(self) -> None:
        if self._disposed:
            raise DisposedError(f"Diagnostic collection {self.name!r} is disposed")

    def publish(
        self,
        source_id: str,
        text: str,
        findings: Iterable[Finding],
        version: Optional[int] = None,
    ) -> List[Diagnostic]:
        """Replace the markers for *source_id*.

        When *version* is given and older than the last published version for
        the same source, the publish is stale and is dropped.
        """
        self._check_alive()
        previous = self._published.get(source_id)
        if (
            version is not None
            and previous is not None
            and previous.version is not None
            and version < previous.version
        ):
            logger.debug("Dropping stale publish for %s (v%s < v%s)",
                         source_id, version, previous.version)
            return list(previous.diagnostics)

        self._forget(source_id)
        lines = text.split("\n")
        diagnostics: List[Diagnostic] = []
        for finding in findings:
            line_text = lines[finding.line_no - 1] if finding.line_no <= len(lines) else ""
            diagnostic = to_diagnostic(source_id, finding, line_text)
            diagnostics.append(diagnostic)
            self._findings.setdefault(diagnostic.key, finding)

        self._published[source_id] = _Published(version=version, diagnostics=diagnostics)
        return list(diagnostics)

    def get(self, source_id: str) -> List[Diagnostic]:
        self._check_alive()
        published = self._published.get(source_id)
        return list(published.diagnostics) if published else []

    def finding_for(self, diagnostic: Diagnostic) -> Optional[Finding]:
        """Return the finding that produced *diagnostic*, if it is still published."""
        self._check_alive()
        return self._findings.get(diagnostic.key)

    def _forget(self, source_id: str) -> None:
        self._published.pop(source_id, None)
        for key in [k for k in self._findings if k[0] == source_id]:
            del self._findings[key]

    def clear(self, source_id: Optional[str] = None) -> None:
        """Drop markers for one source, or for all sources."""
        self._check_alive()
        if source_id is None:
            self._published.clear()
            self._findings.clear()
        else:
            self._forget(source_id)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._published.clear()
        self._findings.clear()
        self._disposed = True

    @property
    def disposed(self) -> bool:
        return self._disposed


DetailRenderer = Callable[[Finding], str]


class DiagnosticsSession:
    """Wires the engine, a DiagnosticCollection and a detail renderer.

    Mirrors an editor extension lifecycle: construct on activation, call
    ``on_document`` for open/change events, ``show_details`` from a quick-fix
    action, and ``dispose`` on deactivation.
    """

    def __init__(
        self,
        rules: Iterable[Rule],
        render_details: DetailRenderer,
        collection: Optional[DiagnosticCollection] = None,
    ) -> None:
        self._rules = tuple(rules)
        self._render_details = render_details
        self.collection = collection or DiagnosticCollection()
        self.active_details: Optional[str] = None
        self._disposed = False

    def on_document(
        self,
        source_id: str,
        text: str,
        language_id: str,
        version: Optional[int] = None,
    ) -> List[Diagnostic]:
        """Rescan a document and republish its markers."""
        if self._disposed:
            raise DisposedError("Diagnostics session is disposed")
        if language_id not in SUPPORTED_LANGUAGES:
            return []
        if is_catalog_source(source_id):
            self.collection.clear(source_id)
            return []
        findings = scan(text, self._rules, source_id)
        return self.collection.publish(source_id, text, findings, version)

    def show_details(self, diagnostic: Diagnostic) -> Optional[str]:
        """Render the finding behind *diagnostic*, replacing any open report."""
        if self._disposed:
            raise DisposedError("Diagnostics session is disposed")
        if diagnostic.source != DIAGNOSTIC_SOURCE:
            return None
        finding = self.collection.finding_for(diagnostic)
        if finding is None:
            return None
        self.active_details = self._render_details(finding)
        return self.active_details

    def dispose(self) -> None:
        self.active_details = None
        self.collection.dispose()
        self._disposed = True
