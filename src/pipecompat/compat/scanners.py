"""Structural scanners over the processor sequence.

Small traversal helpers used by rules that need more than a flat membership
test: sequence positions, open/close tracking in a single forward pass, and
depth-first walks into compound processors (``try``, ``parallel``,
``switch``, ``workflow``...) to find components buried inside them.

Nested entries are normalized with the same discriminant extraction as
top-level processors; entries that cannot be read are skipped.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from pipecompat.compat.normalize import split_component, to_component
from pipecompat.contracts import ComponentRef

# ${! <expression> } interpolation blocks in string fields
_INTERPOLATION = re.compile(r"\$\{!(.*?)\}", re.DOTALL)
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Keys of list-of-objects configs whose entries each carry a processor list
# (processor ``switch`` cases, ``workflow`` branches)
_CASE_CONTAINERS = ("cases", "branches")


def _component_list(entries: Any) -> list[ComponentRef]:
    if not isinstance(entries, list):
        return []
    refs = (to_component(entry, strict=True) for entry in entries)
    return [ref for ref in refs if ref is not None]


def nested_processors(ref: ComponentRef) -> list[ComponentRef]:
    """Immediate child processors of a compound processor.

    Children are found at a list-valued config (``try: [...]``), at
    ``config.processors`` (``parallel``, ``branch``, ``retry``, ``cached``...) and at
    ``config.cases[*].processors`` / ``config.branches[*].processors``.
    """
    if isinstance(ref.config, list):
        return _component_list(ref.config)

    settings = ref.settings
    children = _component_list(settings.get("processors"))
    for container_key in _CASE_CONTAINERS:
        container = settings.get(container_key)
        if isinstance(container, Mapping):
            container = list(container.values())
        if not isinstance(container, list):
            continue
        for case in container:
            if isinstance(case, Mapping):
                children.extend(_component_list(case.get("processors")))
    return children


def iter_processors(processors: Iterable[ComponentRef], *, nested_types: frozenset[str]) -> Iterator[ComponentRef]:
    """Depth-first, pre-order walk over processors and their descendants.

    Args:
        processors: Top-level processors in declaration order.
        nested_types: Processor types whose children are walked.
    """
    for ref in processors:
        yield ref
        if ref.type in nested_types:
            yield from iter_processors(nested_processors(ref), nested_types=nested_types)


def first_index(processors: Sequence[ComponentRef], component_type: str) -> int:
    """Position of the first processor of ``component_type``, or -1."""
    for index, ref in enumerate(processors):
        if ref.type == component_type:
            return index
    return -1


def last_index(processors: Sequence[ComponentRef], component_type: str) -> int:
    """Position of the last processor of ``component_type``, or -1."""
    for index in range(len(processors) - 1, -1, -1):
        if processors[index].type == component_type:
            return index
    return -1


def has_unmatched_open(processors: Iterable[ComponentRef], open_type: str, close_type: str) -> bool:
    """Single forward scan: is an ``open_type`` still open after the last processor?

    An ``open_type`` processor opens the region; a later ``close_type``
    closes it. A ``close_type`` with nothing open has no effect.
    """
    is_open = False
    for ref in processors:
        if ref.type == open_type:
            is_open = True
        elif ref.type == close_type:
            is_open = False
    return is_open


def mapping_texts(processors: Iterable[ComponentRef], mapping_types: frozenset[str]) -> list[str]:
    """Source text of every mapping-language processor, in order."""
    return [ref.text for ref in processors if ref.type in mapping_types]


def interpolations(template: str) -> list[str]:
    """Expressions embedded in ``${! ... }`` blocks of an interpolated string."""
    return [match.strip() for match in _INTERPOLATION.findall(template)]


def identifiers(expression: str) -> list[str]:
    """Identifier tokens of an expression, lowercased (``this.user.password`` -> this, user, password)."""
    return [token.lower() for token in _IDENTIFIER.findall(expression)]


def component_types(entries: Any) -> list[str]:
    """Discriminants of a list of component objects (e.g. ``broker.outputs``)."""
    if not isinstance(entries, list):
        return []
    splits = (split_component(entry) for entry in entries)
    return [split[0] for split in splits if split is not None]
