"""Scanner — pure engine and file collection."""

from safemongo.scanner.engine import is_catalog_source, scan
from safemongo.scanner.files import iter_source_files, scan_paths

__all__ = ["is_catalog_source", "iter_source_files", "scan", "scan_paths"]
