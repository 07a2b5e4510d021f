"""Canonical in-memory form of a pipeline configuration.

Leaf module with no intra-package imports. Instances are produced by
``pipecompat.compat.normalize`` and are read-only afterwards: one
``ParsedPipeline`` per analysis call, discarded once rules are evaluated.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

_EMPTY_SETTINGS: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class ComponentRef:
    """One input, output or processor.

    ``type`` is the component key of the source object (``kafka``,
    ``mapping``, ``try``...) and ``config`` is that key's value. Inputs and
    outputs normally carry a mapping, but processors may carry a string
    (``mapping: "root = this"``) or a list (``try: [...]``), so ``config``
    is left untyped and the accessors below give typed views of it.
    """

    type: str
    config: Any = None
    label: str | None = None

    @property
    def settings(self) -> Mapping[str, Any]:
        """Config as a mapping, or an empty mapping when it is not one."""
        if isinstance(self.config, Mapping):
            return self.config
        return _EMPTY_SETTINGS

    @property
    def text(self) -> str:
        """Config as a string, or ``""`` when it is not one."""
        if isinstance(self.config, str):
            return self.config
        return ""


@dataclass(frozen=True, slots=True)
class ResourceRef:
    """A named shared declaration (cache, rate limiter) referenced by label."""

    label: str
    type: str
    config: Any = None


@dataclass(frozen=True, slots=True)
class PipelineResources:
    """Top-level ``cache_resources`` and ``rate_limit_resources`` declarations."""

    caches: tuple[ResourceRef, ...] = ()
    rate_limiters: tuple[ResourceRef, ...] = ()

    def cache_labels(self) -> frozenset[str]:
        return frozenset(r.label for r in self.caches if r.label)

    def rate_limiter_labels(self) -> frozenset[str]:
        return frozenset(r.label for r in self.rate_limiters if r.label)


@dataclass(frozen=True, slots=True)
class ParsedPipeline:
    """Normalized pipeline: input, ordered processors, output, resources.

    ``processors`` preserves source declaration order exactly. Error-handling
    and resource rules depend on positions within it.
    """

    input: ComponentRef | None = None
    output: ComponentRef | None = None
    processors: tuple[ComponentRef, ...] = ()
    resources: PipelineResources = field(default_factory=PipelineResources)

    @property
    def input_type(self) -> str | None:
        return self.input.type if self.input is not None else None

    @property
    def output_type(self) -> str | None:
        return self.output.type if self.output is not None else None

    def processors_of_type(self, component_type: str) -> tuple[ComponentRef, ...]:
        """Top-level processors with the given type, in declaration order."""
        return tuple(p for p in self.processors if p.type == component_type)

    def has_processor(self, component_type: str) -> bool:
        """Whether any top-level processor has the given type."""
        return any(p.type == component_type for p in self.processors)
