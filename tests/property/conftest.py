# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Strategy Categories:
- JSON-safe values (anything a YAML/JSON decoder can hand us)
- Component objects (single-key mappings, with and without metadata keys)
- Pipeline-shaped configs (right section names, arbitrary contents)

Usage:
    from tests.property.conftest import pipeline_like

    @given(raw=pipeline_like)
    def test_never_raises(raw: dict) -> None:
        ...
"""

# =============================================================================
# Hypothesis Settings
# =============================================================================
#
# For standardized @settings decorators, import from tests.property.settings:
#   from tests.property.settings import STANDARD_SETTINGS, DETERMINISM_SETTINGS
#
# Tiers: DETERMINISM (500), STANDARD (100), QUICK (20)
# =============================================================================

from __future__ import annotations

from hypothesis import strategies as st

from pipecompat.compat.catalogs import DEFAULT_CATALOGS

# =============================================================================
# Core JSON Strategies
# =============================================================================

json_primitives = (
    st.none()
    | st.booleans()
    | st.integers(min_value=-(2**53 - 1), max_value=2**53 - 1)
    | st.floats(allow_nan=False, allow_infinity=False)
    | st.text(max_size=40)
)

json_values = st.recursive(
    json_primitives,
    lambda children: (st.lists(children, max_size=6) | st.dictionaries(st.text(max_size=15), children, max_size=6)),
    max_leaves=30,
)

# =============================================================================
# Component Strategies
# =============================================================================

# Types the rules actually look at, so generated configs reach rule bodies
_KNOWN_TYPES = sorted(
    DEFAULT_CATALOGS.batching_outputs
    | DEFAULT_CATALOGS.cdc_inputs
    | DEFAULT_CATALOGS.nested_processor_types
    | DEFAULT_CATALOGS.blocking_processors
    | DEFAULT_CATALOGS.mapping_processors
    | {
        "http_server",
        "sync_response",
        "csv",
        "file",
        "compress",
        "decompress",
        "cache",
        "cached",
        "rate_limit",
        "log",
        "nats_request_reply",
        "switch",
        "broker",
        "avro",
        "protobuf",
    }
)

component_type = st.sampled_from(_KNOWN_TYPES) | st.text(min_size=1, max_size=12)

component_config = (
    json_values
    | st.dictionaries(
        st.sampled_from(
            ["batching", "batch_count", "resource", "cache", "url", "message", "cap", "processors", "cases", "check", "timeout"]
        ),
        json_values,
        max_size=4,
    )
    | st.text(max_size=60).map(lambda s: s + " parse_json()")
)

component = st.builds(lambda t, c: {t: c}, component_type, component_config)

component_with_metadata = st.builds(
    lambda comp, label, extra: {**comp, "label": label, **extra},
    component,
    json_primitives,
    st.dictionaries(st.text(max_size=8).map(lambda s: "_" + s), json_values, max_size=2),
)

maybe_component = component | component_with_metadata | json_values

# =============================================================================
# Pipeline Strategies
# =============================================================================

pipeline_like = st.fixed_dictionaries(
    {},
    optional={
        "input": maybe_component,
        "pipeline": st.fixed_dictionaries({"processors": st.lists(maybe_component, max_size=8)}) | json_values,
        "output": maybe_component,
        "cache_resources": st.lists(maybe_component, max_size=3) | json_values,
        "rate_limit_resources": st.lists(maybe_component, max_size=3) | json_values,
    },
)

any_config = pipeline_like | json_values
