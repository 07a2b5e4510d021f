# tests/conftest.py
"""Shared test fixtures and helpers.

Pipeline fixtures are plain decoded dicts, exactly what a YAML/JSON decoder
hands to check_compatibility(). Builders below keep the scenario tests short.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from typing import Any

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Logging isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo configure_logging() calls made by a test (CLI callback included).

    The CLI binds its handler to the stream that was current at invocation
    time; leaving it installed would point later tests at a closed stream.
    """
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield
    root.handlers = saved_handlers
    root.setLevel(saved_level)
    structlog.reset_defaults()


# =============================================================================
# Pipeline builders
# =============================================================================


def make_pipeline(
    *,
    input: dict[str, Any] | None = None,
    processors: list[Any] | None = None,
    output: dict[str, Any] | None = None,
    cache_resources: list[Any] | None = None,
    rate_limit_resources: list[Any] | None = None,
) -> dict[str, Any]:
    """Build a raw pipeline config dict, omitting sections left as None."""
    raw: dict[str, Any] = {}
    if input is not None:
        raw["input"] = input
    if processors is not None:
        raw["pipeline"] = {"processors": processors}
    if output is not None:
        raw["output"] = output
    if cache_resources is not None:
        raw["cache_resources"] = cache_resources
    if rate_limit_resources is not None:
        raw["rate_limit_resources"] = rate_limit_resources
    return raw


@pytest.fixture
def clean_pipeline() -> dict[str, Any]:
    """A well-formed pipeline that triggers no rule."""
    return make_pipeline(
        input={"kafka": {"addresses": ["localhost:9092"], "topics": ["in"], "consumer_group": "cg"}},
        processors=[{"mapping": "root = this"}],
        output={"kafka": {"addresses": ["localhost:9092"], "topic": "out"}},
    )
