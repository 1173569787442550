"""JSON reporter for CI pipelines."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from safemongo.findings.models import ScanResult


def to_dict(result: ScanResult) -> Dict[str, Any]:
    """Convert ScanResult to a JSON-serialisable dict."""
    findings_list: List[Dict[str, Any]] = []
    for path, f in result.iter_findings():
        rule = f.rule
        findings_list.append({
            "rule": rule.id,
            "rule_name": rule.name,
            "severity": rule.severity,
            "category": rule.category,
            "file": path,
            "line": f.line_no,
            "text": f.matched_text,
            "description": rule.description,
            "remediation": rule.remediation,
            "reference_url": rule.reference_url,
            "is_blocking": result.is_blocking(f),
        })

    return {
        "version": "1.0",
        "scanned_files": result.scanned_files,
        "total_findings": result.total_findings,
        "fail_on": result.fail_on,
        "blocked": result.blocked,
        "findings": findings_list,
        "skipped_files": result.skipped_files,
        "scan_duration_ms": result.scan_duration_ms,
    }


def render(result: ScanResult) -> str:
    """Return formatted JSON string."""
    return json.dumps(to_dict(result), indent=2, ensure_ascii=False)
