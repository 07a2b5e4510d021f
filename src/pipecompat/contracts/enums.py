"""Severity and category enums shared across the rule engine.

Severities are diagnostic classifications of pipeline quality, not program
faults. A pipeline that triggers ERROR rules is still a valid input to the
engine; evaluation never fails because of what it finds.
"""

from enum import StrEnum


class Severity(StrEnum):
    """Diagnostic severity of a triggered compatibility rule.

    Values:
        ERROR: The pipeline will not work as written (blocking)
        WARNING: The pipeline works but is risky
        INFO: Advisory, the pipeline may be improved
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Sort rank, most severe first (error=0, warning=1, info=2)."""
        return _SEVERITY_RANK[self]

    def at_least(self, threshold: "Severity") -> bool:
        """Whether this severity is as severe as ``threshold`` or more."""
        return self.rank <= threshold.rank


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.ERROR: 0,
    Severity.WARNING: 1,
    Severity.INFO: 2,
}


class RuleCategory(StrEnum):
    """Concern a compatibility rule belongs to.

    Used to group the registry for listing and documentation only; the
    category never influences evaluation order or outcome.
    """

    SYNC_RESPONSE = "sync_response"
    BATCHING = "batching"
    FORMAT = "format"
    RESOURCES = "resources"
    ERROR_HANDLING = "error_handling"
    PERFORMANCE = "performance"
    CDC = "cdc"
    SECURITY = "security"
    MESSAGING = "messaging"
    OUTPUT = "output"
