"""Library entry point returning JSON-ready compatibility results."""

from __future__ import annotations

from typing import Any

from pipecompat.compat.evaluator import check_pipeline_compatibility
from pipecompat.compat.formatter import format_compatibility_warnings
from pipecompat.compat.rules import RuleRegistry
from pipecompat.contracts import CompatibilityReport, Severity


def check_compatibility(
    pipeline_config: Any,
    *,
    include_report: bool = True,
    registry: RuleRegistry | None = None,
    min_severity: Severity | None = None,
) -> CompatibilityReport:
    """Check a decoded pipeline configuration for compatibility issues.

    Args:
        pipeline_config: Pipeline as produced by a YAML/JSON decoder.
        include_report: Add a formatted ``report`` string when any warning
            was produced.
        registry: Rules to evaluate. Defaults to the built-in registry.
        min_severity: Drop warnings less severe than this.

    Returns:
        ``{"warnings": [...]}`` plus ``"report"`` when requested and non-empty.
    """
    warnings = check_pipeline_compatibility(pipeline_config, registry, min_severity=min_severity)
    result: CompatibilityReport = {"warnings": [w.to_dict() for w in warnings]}
    if include_report and warnings:
        result["report"] = format_compatibility_warnings(warnings)
    return result
