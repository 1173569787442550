"""Finding data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

from safemongo.config.schema import severity_at_or_above
from safemongo.rules.models import Rule


@dataclass(frozen=True)
class Finding:
    """One match of a rule against one source line.

    ``rule`` is the matching Rule object itself, ``line_no`` is 1-based and
    ``matched_text`` is the line with surrounding whitespace stripped.
    """

    rule: Rule
    line_no: int
    matched_text: str

    @property
    def rule_id(self) -> str:
        return self.rule.id

    @property
    def severity(self) -> str:
        return self.rule.severity


@dataclass
class ScanResult:
    """Complete result of scanning a set of files."""

    findings_by_file: Dict[str, List[Finding]] = field(default_factory=dict)
    skipped_files: List[str] = field(default_factory=list)
    scanned_files: int = 0
    fail_on: str = "high"
    scan_duration_ms: float = 0.0

    def add(self, path: str, findings: List[Finding]) -> None:
        if findings:
            self.findings_by_file[path] = findings

    def iter_findings(self) -> Iterator[Tuple[str, Finding]]:
        """Yield (path, finding) pairs — file order, then scan order."""
        for path, findings in self.findings_by_file.items():
            for finding in findings:
                yield path, finding

    def is_blocking(self, finding: Finding) -> bool:
        return severity_at_or_above(finding.severity, self.fail_on)

    @property
    def total_findings(self) -> int:
        return sum(len(f) for f in self.findings_by_file.values())

    @property
    def blocking_findings(self) -> List[Tuple[str, Finding]]:
        return [(p, f) for p, f in self.iter_findings() if self.is_blocking(f)]

    @property
    def blocked(self) -> bool:
        return any(self.is_blocking(f) for _, f in self.iter_findings())
