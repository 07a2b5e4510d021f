"""Compatibility rule engine: normalize, evaluate, report."""

from pipecompat.compat.catalogs import DEFAULT_CATALOGS, RuleCatalogs
from pipecompat.compat.evaluator import check_compatibility_parsed, check_pipeline_compatibility
from pipecompat.compat.formatter import format_compatibility_warnings
from pipecompat.compat.normalize import parse_pipeline_for_compatibility
from pipecompat.compat.rules import (
    COMPATIBILITY_RULES,
    CompatibilityRule,
    RuleRegistry,
    build_rules,
    default_registry,
)

__all__ = [
    "COMPATIBILITY_RULES",
    "DEFAULT_CATALOGS",
    "CompatibilityRule",
    "RuleCatalogs",
    "RuleRegistry",
    "build_rules",
    "check_compatibility_parsed",
    "check_pipeline_compatibility",
    "default_registry",
    "format_compatibility_warnings",
    "parse_pipeline_for_compatibility",
]
