"""SARIF v2.1.0 reporter — GitHub Advanced Security / Code Scanning."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from safemongo import __version__
from safemongo.findings.models import ScanResult
from safemongo.findings.severity import sarif_level, security_severity

SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"


def to_dict(result: ScanResult) -> Dict[str, Any]:
    """Convert ScanResult to a SARIF v2.1.0 dict."""
    rules: List[Dict[str, Any]] = []
    seen_rules: set[str] = set()
    results: List[Dict[str, Any]] = []

    for path, f in result.iter_findings():
        rule = f.rule
        # Rule definition (only once per rule id)
        if rule.id not in seen_rules:
            seen_rules.add(rule.id)
            rules.append({
                "id": rule.id,
                "name": rule.name,
                "shortDescription": {"text": rule.name},
                "fullDescription": {"text": rule.description},
                "help": {"text": rule.remediation},
                "helpUri": rule.reference_url,
                "defaultConfiguration": {"level": sarif_level(rule.severity)},
                "properties": {
                    "security-severity": security_severity(rule.severity),
                    "tags": ["security", "mongodb", rule.category],
                },
            })

        results.append({
            "ruleId": rule.id,
            "level": sarif_level(rule.severity),
            "message": {"text": f"{rule.name}: {rule.description}"},
            "locations": [
                {
                    "physicalLocation": {
                        "artifactLocation": {"uri": path},
                        "region": {
                            "startLine": f.line_no,
                            "snippet": {"text": f.matched_text},
                        },
                    }
                }
            ],
        })

    return {
        "$schema": SARIF_SCHEMA,
        "version": "2.1.0",
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "safemongo",
                        "version": __version__,
                        "informationUri": "https://www.mongodb.com/docs/manual/security/",
                        "rules": rules,
                    }
                },
                "results": results,
            }
        ],
    }


def render(result: ScanResult) -> str:
    """Return SARIF JSON string."""
    return json.dumps(to_dict(result), indent=2, ensure_ascii=False)
