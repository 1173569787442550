"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal

Severity = Literal["low", "medium", "high"]

SEVERITY_ORDER: dict[str, int] = {
    "low": 0,
    "medium": 1,
    "high": 2,
}

SEVERITIES = tuple(SEVERITY_ORDER)

OUTPUT_FORMATS = ("terminal", "json", "sarif")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_EXTENSIONS = [".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs"]


def severity_rank(severity: str) -> int:
    """Return the risk rank of *severity*; unknown values rank lowest (-1)."""
    return SEVERITY_ORDER.get(severity, -1)


def severity_at_or_above(finding_sev: str, threshold: str) -> bool:
    """Return True if *finding_sev* is at or above *threshold*."""
    return severity_rank(finding_sev) >= SEVERITY_ORDER.get(threshold, 0)


@dataclass
class ScanConfig:
    fail_on: Severity = "high"  # fail on findings at or above this level
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    max_file_size_kb: int = 512


@dataclass
class OutputConfig:
    format: Literal["terminal", "json", "sarif"] = "terminal"
    show_summary: bool = True
    show_examples: bool = False


@dataclass
class RulesConfig:
    enable: List[str] = field(default_factory=list)  # empty = all enabled
    disable: List[str] = field(default_factory=list)


@dataclass
class IgnoreConfig:
    paths: List[str] = field(default_factory=list)
    rules: List[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class SafeMongoConfig:
    version: str = "1.0"
    scan: ScanConfig = field(default_factory=ScanConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)
    ignore: IgnoreConfig = field(default_factory=IgnoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
