"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core/compat.
Settings classes are NOT re-exported here - import them from
pipecompat.core.config.

Import patterns:
    # Contracts (lightweight, no heavy dependencies)
    from pipecompat.contracts import ParsedPipeline, Severity

    # Settings classes (from core, pulls in pydantic/dynaconf)
    from pipecompat.core.config import CompatibilitySettings
"""

from pipecompat.contracts.enums import RuleCategory, Severity
from pipecompat.contracts.errors import (
    DuplicateRuleError,
    RegistryError,
    UnknownRuleError,
)
from pipecompat.contracts.pipeline import (
    ComponentRef,
    ParsedPipeline,
    PipelineResources,
    ResourceRef,
)
from pipecompat.contracts.results import (
    CompatibilityReport,
    CompatibilityWarning,
    WarningRecord,
)

__all__ = [
    "CompatibilityReport",
    "CompatibilityWarning",
    "ComponentRef",
    "DuplicateRuleError",
    "ParsedPipeline",
    "PipelineResources",
    "RegistryError",
    "ResourceRef",
    "RuleCategory",
    "Severity",
    "UnknownRuleError",
    "WarningRecord",
]
