"""Normalize a raw pipeline configuration into a ParsedPipeline.

The raw value is whatever a YAML/JSON decoder produced: nested dicts, lists
and scalars with no guarantee of shape. Every component position (input,
output, each processor, each resource) is a single-key object whose key is
the component type, optionally accompanied by metadata keys (``label`` and
keys starting with ``_``).

Normalization never raises. Missing or malformed sections become ``None`` or
empty tuples, and processor entries that cannot be read are skipped so the
rest of the pipeline can still be analysed.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from pipecompat.contracts import ComponentRef, ParsedPipeline, PipelineResources, ResourceRef
from pipecompat.core.logging import get_logger

logger = get_logger(__name__)

_LABEL_KEY = "label"
_UNKNOWN_TYPE = "unknown"


def is_metadata_key(key: object) -> bool:
    """Whether ``key`` is component metadata rather than a component type."""
    return not isinstance(key, str) or key == _LABEL_KEY or key.startswith("_")


def component_keys(obj: Mapping[Any, Any]) -> list[str]:
    """Candidate component-type keys of ``obj``, in enumeration order."""
    return [k for k in obj if not is_metadata_key(k)]


def split_component(obj: Any, *, strict: bool = False) -> tuple[str, Any] | None:
    """Extract ``(type, config)`` from a single-key component object.

    Args:
        obj: Raw component object.
        strict: Require exactly one component key. When False, the first
            enumerated component key wins and extra keys are ignored.

    Returns:
        The discriminant and its value, or None if ``obj`` is not a mapping
        or has no usable component key.
    """
    if not isinstance(obj, Mapping):
        return None
    keys = component_keys(obj)
    if not keys or (strict and len(keys) != 1):
        return None
    return keys[0], obj[keys[0]]


def _label_of(obj: Mapping[Any, Any]) -> str | None:
    label = obj.get(_LABEL_KEY)
    return label if isinstance(label, str) else None


def to_component(obj: Any, *, strict: bool = False) -> ComponentRef | None:
    """Build a ComponentRef from a raw component object (see split_component)."""
    split = split_component(obj, strict=strict)
    if split is None:
        return None
    component_type, config = split
    return ComponentRef(type=component_type, config=copy.deepcopy(config), label=_label_of(obj))


def _parse_processors(section: Any) -> tuple[ComponentRef, ...]:
    if not isinstance(section, Mapping):
        return ()
    entries = section.get("processors")
    if not isinstance(entries, list):
        return ()

    processors: list[ComponentRef] = []
    for index, entry in enumerate(entries):
        ref = to_component(entry, strict=True)
        if ref is None:
            logger.debug("processor_entry_skipped", index=index, entry_type=type(entry).__name__)
            continue
        processors.append(ref)
    return tuple(processors)


def _parse_resources(entries: Any) -> tuple[ResourceRef, ...]:
    if not isinstance(entries, list):
        return ()

    resources: list[ResourceRef] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        split = split_component(entry)
        resource_type, config = split if split is not None else (_UNKNOWN_TYPE, None)
        raw_label = entry.get(_LABEL_KEY)
        resources.append(
            ResourceRef(
                label="" if raw_label is None else str(raw_label),
                type=resource_type,
                config=copy.deepcopy(config),
            )
        )
    return tuple(resources)


def parse_pipeline_for_compatibility(raw: Any) -> ParsedPipeline:
    """Convert a raw configuration object into its canonical form.

    Expected (but not required) shape::

        {
            "input": {<type>: {...}},
            "pipeline": {"processors": [{<type>: ...}, ...]},
            "output": {<type>: {...}},
            "cache_resources": [{"label": ..., <type>: {...}}, ...],
            "rate_limit_resources": [{"label": ..., <type>: {...}}, ...],
        }

    Nested outputs (``switch.cases[].output``, ``broker.outputs[]``) are left
    in ``output.config``; their shape differs per output type.

    Args:
        raw: Decoded configuration. Not mutated.

    Returns:
        A new ParsedPipeline. Never raises.
    """
    if not isinstance(raw, Mapping):
        logger.debug("pipeline_config_not_mapping", config_type=type(raw).__name__)
        return ParsedPipeline()

    return ParsedPipeline(
        input=to_component(raw.get("input")),
        output=to_component(raw.get("output")),
        processors=_parse_processors(raw.get("pipeline")),
        resources=PipelineResources(
            caches=_parse_resources(raw.get("cache_resources")),
            rate_limiters=_parse_resources(raw.get("rate_limit_resources")),
        ),
    )
