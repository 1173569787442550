"""Severity → presentation mapping.

Pure lookups consumed by reporters and the diagnostics publisher. Every
function is total: an unrecognised severity falls back to a neutral,
lowest-priority encoding instead of raising.
"""

from __future__ import annotations

from typing import Dict

from safemongo.config.schema import SEVERITY_ORDER

_SEVERITY_COLOR: Dict[str, str] = {
    "high": "#FF4D4F",  # red
    "medium": "#FAAD14",  # orange
    "low": "#52C41A",  # green
}
_FALLBACK_COLOR = "#1890FF"  # blue

_SEVERITY_ICON: Dict[str, str] = {
    "high": "🛑",
    "medium": "⚠️",
    "low": "ℹ️",
}
_FALLBACK_ICON = "•"

_DIAGNOSTIC_LEVEL: Dict[str, str] = {
    "high": "error",
    "medium": "warning",
    "low": "information",
}
_FALLBACK_LEVEL = "hint"

_SEVERITY_STYLE: Dict[str, str] = {
    "high": "bold white on red",
    "medium": "bold black on dark_orange",
    "low": "bold black on green",
}

_SARIF_LEVEL: Dict[str, str] = {
    "high": "error",
    "medium": "warning",
    "low": "note",
}

_SECURITY_SEVERITY: Dict[str, str] = {
    "high": "7.5",
    "medium": "5.0",
    "low": "2.0",
}


def severity_color(severity: str) -> str:
    """Hex color for *severity*."""
    return _SEVERITY_COLOR.get(severity, _FALLBACK_COLOR)


def severity_icon(severity: str) -> str:
    """Glyph shown in front of diagnostic messages."""
    return _SEVERITY_ICON.get(severity, _FALLBACK_ICON)


def diagnostic_level(severity: str) -> str:
    """error | warning | information | hint."""
    return _DIAGNOSTIC_LEVEL.get(severity, _FALLBACK_LEVEL)


def severity_style(severity: str) -> str:
    """Rich style for a severity pill."""
    return _SEVERITY_STYLE.get(severity, "bold white on blue")


def sarif_level(severity: str) -> str:
    return _SARIF_LEVEL.get(severity, "note")


def security_severity(severity: str) -> str:
    """SARIF security-severity score (0.0 – 10.0)."""
    return _SECURITY_SEVERITY.get(severity, "0.0")


def sort_key(severity: str) -> int:
    """Higher risk sorts first when used as ``key=`` with ``reverse=False``."""
    return -SEVERITY_ORDER.get(severity, -1)
