"""Rule data model — pattern stored as string, compiled at construction."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Tuple
from urllib.parse import urlparse

from safemongo.config.schema import SEVERITIES, Severity
from safemongo.errors import CatalogError, RuleError

CATEGORIES = ("injection", "exposure", "auth", "dos", "error-handling", "schema")


@dataclass(frozen=True)
class Rule:
    """A single detection rule.

    ``pattern`` is kept as a raw string so the rule stays serialisable; the
    matcher built from ``pattern`` + ``flags`` is available as
    ``compiled_pattern``. A malformed definition raises :class:`RuleError`
    when the rule is constructed, never during a scan.
    """

    id: str
    name: str
    pattern: str
    severity: Severity
    description: str
    remediation: str
    unsafe_example: str
    safe_example: str
    reference_url: str
    category: str = "injection"
    flags: int = re.IGNORECASE

    _compiled_pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise RuleError("Rule id must be a non-empty string")
        if self.severity not in SEVERITIES:
            raise RuleError(f"{self.id}: unknown severity {self.severity!r}")
        if self.category not in CATEGORIES:
            raise RuleError(f"{self.id}: unknown category {self.category!r}")
        url = urlparse(self.reference_url)
        if url.scheme not in ("http", "https") or not url.netloc:
            raise RuleError(f"{self.id}: invalid reference_url {self.reference_url!r}")
        try:
            compiled = re.compile(self.pattern, self.flags)
        except re.error as exc:
            raise RuleError(f"{self.id}: invalid pattern: {exc}") from exc
        # frozen dataclass: cache via object.__setattr__
        object.__setattr__(self, "_compiled_pattern", compiled)

    @property
    def compiled_pattern(self) -> re.Pattern[str]:
        return self._compiled_pattern

    def matches(self, line: str) -> bool:
        """True if the matcher finds a match anywhere within *line*."""
        return self.compiled_pattern.search(line) is not None


def validate_catalog(rules: Iterable[Rule]) -> Tuple[Rule, ...]:
    """Return *rules* as an ordered tuple, raising CatalogError on duplicate ids."""
    ordered = tuple(rules)
    seen: set[str] = set()
    for rule in ordered:
        if not isinstance(rule, Rule):
            raise CatalogError(f"Catalog entry is not a Rule: {rule!r}")
        if rule.id in seen:
            raise CatalogError(f"Duplicate rule id: {rule.id}")
        seen.add(rule.id)
    return ordered
