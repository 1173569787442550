"""Editor-integration state: diagnostics and detail views."""

from safemongo.integration.diagnostics import (
    Diagnostic,
    DiagnosticCollection,
    DiagnosticsSession,
    DisposedError,
)

__all__ = ["Diagnostic", "DiagnosticCollection", "DiagnosticsSession", "DisposedError"]
