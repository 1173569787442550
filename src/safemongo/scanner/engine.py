"""Core scan engine — line-by-line, rule-by-rule matching.

``scan`` is a pure function of its inputs: it performs no I/O, keeps no
state between calls and never raises for ``str`` input. Callers that want
``\\r\\n`` handled differently must normalise line endings themselves; the
engine splits on ``\\n`` only.
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Iterable, List, Optional

from safemongo.findings.models import Finding
from safemongo.rules.models import Rule
from safemongo.rules.unsafe_queries import CATALOG_MODULE, CATALOG_SOURCE_NAMES


def is_catalog_source(source_id: Optional[str]) -> bool:
    """True if *source_id* names the module that defines the built-in catalog.

    Matches the catalog's basename in source or compiled form (any directory,
    either path separator) or its dotted module name.
    """
    if not source_id:
        return False
    if source_id == CATALOG_MODULE:
        return True
    basename = PurePath(source_id.replace("\\", "/")).name
    return basename in CATALOG_SOURCE_NAMES


def scan(
    text: str,
    rules: Iterable[Rule],
    source_id: Optional[str] = None,
) -> List[Finding]:
    """Return findings for *text*, ordered by line then by rule order.

    If *source_id* identifies the catalog's own source the result is always
    empty, since that file contains every unsafe example verbatim.
    """
    if is_catalog_source(source_id) or not text:
        return []

    ordered_rules = list(rules)
    findings: List[Finding] = []

    for index, line in enumerate(text.split("\n")):
        for rule in ordered_rules:
            if rule.compiled_pattern.search(line) is None:
                continue
            findings.append(
                Finding(rule=rule, line_no=index + 1, matched_text=line.strip())
            )

    return findings
