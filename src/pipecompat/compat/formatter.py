"""Human-readable rendering of compatibility warnings."""

from __future__ import annotations

from collections.abc import Sequence

from pipecompat.contracts import CompatibilityWarning, Severity

REPORT_HEADER = "Compatibility Warnings:"

_MARKERS: dict[Severity, str] = {
    Severity.ERROR: "[X]",
    Severity.WARNING: "[!]",
    Severity.INFO: "[i]",
}


def format_compatibility_warnings(warnings: Sequence[CompatibilityWarning]) -> str:
    """Render warnings as a multi-line report.

    Errors come first, then warnings, then infos; order within a severity
    is preserved. An empty sequence renders as an empty string.

    Example::

        Compatibility Warnings:

          [X] sync_response output requires http_server input to work correctly
              -> Change input to http_server or use a different output type
    """
    if not warnings:
        return ""

    lines = [REPORT_HEADER, ""]
    # sorted() is stable, so declaration order survives within a severity
    for warning in sorted(warnings, key=lambda w: w.severity.rank):
        lines.append(f"  {_MARKERS[warning.severity]} {warning.message}")
        if warning.suggestion:
            lines.append(f"      -> {warning.suggestion}")
    return "\n".join(lines)
