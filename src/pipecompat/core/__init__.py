# src/pipecompat/core/__init__.py
"""Core infrastructure: Configuration, Logging.

Settings live in pipecompat.core.config and are imported from there directly;
they depend on the rule engine, which itself logs through this package.
"""

from pipecompat.core.logging import (
    configure_logging,
    get_logger,
)

__all__ = [
    "configure_logging",
    "get_logger",
]
