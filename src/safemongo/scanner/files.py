"""File collection — walk paths, read sources, run the engine per file.

This is the I/O edge around the pure engine: read failures, oversized and
binary files become entries in ``ScanResult.skipped_files``, never findings.
"""

from __future__ import annotations

import logging
import time
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from safemongo.config.schema import SafeMongoConfig
from safemongo.findings.models import ScanResult
from safemongo.rules.models import Rule
from safemongo.scanner.engine import scan

logger = logging.getLogger(__name__)

EXCLUDED_DIRS = frozenset({".git", "node_modules", "__pycache__", ".venv"})


def _relative(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def _is_ignored(rel_path: str, ignore_globs: Sequence[str]) -> bool:
    return any(fnmatch(rel_path, g) for g in ignore_globs)


def iter_source_files(
    paths: Sequence[Path],
    extensions: Sequence[str],
) -> Iterator[Path]:
    """Yield candidate files under *paths* in a stable (sorted) order.

    Explicitly named files are always yielded, whatever their extension.
    """
    exts = {e.lower() for e in extensions}
    for path in paths:
        if path.is_file():
            yield path
            continue
        if not path.is_dir():
            logger.warning("Path does not exist: %s", path)
            continue
        for candidate in sorted(path.rglob("*")):
            if any(part in EXCLUDED_DIRS for part in candidate.relative_to(path).parts):
                continue
            if candidate.is_file() and candidate.suffix.lower() in exts:
                yield candidate


def read_source(path: Path, max_bytes: int) -> tuple[Optional[str], Optional[str]]:
    """Return (text, None) or (None, skip_reason)."""
    try:
        size = path.stat().st_size
        if size > max_bytes:
            return None, f"larger than {max_bytes // 1024} KB"
        data = path.read_bytes()
    except OSError as exc:
        return None, f"unreadable: {exc.strerror or exc}"
    if b"\x00" in data[:8192]:
        return None, "binary"
    return data.decode("utf-8", errors="replace"), None


def scan_paths(
    paths: Sequence[Path],
    rules: List[Rule],
    config: SafeMongoConfig,
    root: Path,
) -> ScanResult:
    """Scan every source file under *paths* with *rules*."""
    start = time.perf_counter()
    result = ScanResult(fail_on=config.scan.fail_on)
    ignore_globs = config.ignore.paths
    max_bytes = config.scan.max_file_size_kb * 1024

    for path in iter_source_files(paths, config.scan.extensions):
        rel = _relative(path, root)

        if _is_ignored(rel, ignore_globs):
            result.skipped_files.append(f"{rel} (ignored)")
            logger.info("Skipping %s (ignored)", rel)
            continue

        text, reason = read_source(path, max_bytes)
        if text is None:
            result.skipped_files.append(f"{rel} ({reason})")
            logger.warning("Skipping %s (%s)", rel, reason)
            continue

        # CRLF sources: the engine splits on \n only
        findings = scan(text.replace("\r\n", "\n"), rules, source_id=str(path))
        result.scanned_files += 1
        result.add(rel, findings)
        logger.debug("%s: %d finding(s)", rel, len(findings))

    result.scan_duration_ms = round((time.perf_counter() - start) * 1000, 2)
    logger.debug(
        "Scanned %d file(s), %d finding(s), %d skipped in %.0fms",
        result.scanned_files,
        result.total_findings,
        len(result.skipped_files),
        result.scan_duration_ms,
    )
    return result
