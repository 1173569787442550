"""Finding models and severity presentation."""

from safemongo.findings.models import Finding, ScanResult
from safemongo.findings.severity import (
    diagnostic_level,
    severity_color,
    severity_icon,
)

__all__ = [
    "Finding",
    "ScanResult",
    "diagnostic_level",
    "severity_color",
    "severity_icon",
]
