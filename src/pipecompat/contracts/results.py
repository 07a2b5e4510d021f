"""Evaluation result types.

``CompatibilityWarning`` is the in-process value produced per triggered
rule. ``WarningRecord`` and ``CompatibilityReport`` are the plain-dict
shapes handed to callers that serialize results (JSON output, tool
responses). At runtime they are ordinary dicts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NotRequired, TypedDict

from pipecompat.contracts.enums import Severity


class WarningRecord(TypedDict):
    """A triggered rule as a JSON-ready dict."""

    rule: str
    severity: str
    message: str
    suggestion: NotRequired[str]


class CompatibilityReport(TypedDict):
    """Result of ``check_compatibility``.

    ``report`` is present only when a human-readable report was requested
    and at least one warning was produced.
    """

    warnings: list[WarningRecord]
    report: NotRequired[str]


@dataclass(frozen=True, slots=True)
class CompatibilityWarning:
    """A triggered compatibility rule.

    Ephemeral: produced per evaluation call, never persisted.
    """

    rule: str
    severity: Severity
    message: str
    suggestion: str | None = None

    def to_dict(self) -> WarningRecord:
        record: WarningRecord = {
            "rule": self.rule,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.suggestion is not None:
            record["suggestion"] = self.suggestion
        return record
