"""
Utility functions for the stateflow library.
"""

import os
import reprlib

# Environment variable to control per-step debug logging
DEBUG_TRANSITIONS = os.environ.get("STATEFLOW_DEBUG", "").lower() in ("1", "true", "yes")

_short_repr = reprlib.Repr()
_short_repr.maxstring = 60
_short_repr.maxother = 60


def describe(value: object) -> str:
    """Return a bounded repr suitable for log records."""

    return _short_repr.repr(value)


def action_name(action: object) -> str:
    """Name an action by its qualified name, falling back to a bounded repr."""

    return getattr(action, "__qualname__", None) or describe(action)


__all__ = [
    "DEBUG_TRANSITIONS",
    "action_name",
    "describe",
]
