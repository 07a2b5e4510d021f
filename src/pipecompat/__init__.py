"""pipecompat: compatibility checks for declarative stream pipelines.

Typical use::

    import yaml
    from pipecompat import check_compatibility

    result = check_compatibility(yaml.safe_load(open("pipeline.yaml")))
    print(result.get("report", "No compatibility issues found."))
"""

from pipecompat.api import check_compatibility
from pipecompat.compat import (
    COMPATIBILITY_RULES,
    check_pipeline_compatibility,
    format_compatibility_warnings,
    parse_pipeline_for_compatibility,
)
from pipecompat.contracts import CompatibilityWarning, ParsedPipeline, Severity

__version__ = "0.3.0"

__all__ = [
    "COMPATIBILITY_RULES",
    "CompatibilityWarning",
    "ParsedPipeline",
    "Severity",
    "__version__",
    "check_compatibility",
    "check_pipeline_compatibility",
    "format_compatibility_warnings",
    "parse_pipeline_for_compatibility",
]
