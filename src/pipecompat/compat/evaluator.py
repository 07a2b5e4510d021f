"""Drive a rule registry over one normalized pipeline.

Each rule is consulted exactly once, in registry order. A rule whose
condition raises is treated as not triggered: the fault is logged and
evaluation moves on to the next rule, so one defective rule can never
hide the diagnostics of the others.
"""

from __future__ import annotations

from typing import Any

from pipecompat.compat.normalize import parse_pipeline_for_compatibility
from pipecompat.compat.rules import RuleRegistry, default_registry
from pipecompat.contracts import CompatibilityWarning, ParsedPipeline, Severity
from pipecompat.core.logging import get_logger

logger = get_logger(__name__)


def check_compatibility_parsed(
    pipeline: ParsedPipeline,
    registry: RuleRegistry | None = None,
    *,
    min_severity: Severity | None = None,
) -> list[CompatibilityWarning]:
    """Evaluate every rule against an already-normalized pipeline.

    Args:
        pipeline: Normalized pipeline.
        registry: Rules to evaluate. Defaults to the built-in registry.
        min_severity: Drop warnings less severe than this. None keeps all.

    Returns:
        Warnings for triggered rules, in registry order.
    """
    rules = registry if registry is not None else default_registry()

    warnings: list[CompatibilityWarning] = []
    failed = 0
    for rule in rules:
        if min_severity is not None and not rule.severity.at_least(min_severity):
            continue
        try:
            triggered = rule.evaluate(pipeline)
        except Exception as e:
            failed += 1
            logger.warning(
                "compatibility_rule_failed",
                rule_id=rule.id,
                error_type=type(e).__name__,
                error=str(e),
            )
            continue
        if triggered:
            warnings.append(
                CompatibilityWarning(
                    rule=rule.id,
                    severity=rule.severity,
                    message=rule.message,
                    suggestion=rule.suggestion,
                )
            )

    logger.debug(
        "compatibility_evaluated",
        rules=len(rules),
        triggered=len(warnings),
        failed=failed,
    )
    return warnings


def check_pipeline_compatibility(
    raw: Any,
    registry: RuleRegistry | None = None,
    *,
    min_severity: Severity | None = None,
) -> list[CompatibilityWarning]:
    """Normalize ``raw`` once and evaluate the registry against it.

    Never raises for decoded YAML/JSON values and never mutates ``raw``.
    """
    pipeline = parse_pipeline_for_compatibility(raw)
    return check_compatibility_parsed(pipeline, registry, min_severity=min_severity)
