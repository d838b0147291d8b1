"""Value classification for the resolver.

Every yielded value is classified once into a tagged variant which
:func:`stateflow.resolve.resolve` then dispatches on.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from stateflow.process import ProcessHandle


@dataclass(frozen=True)
class ProcessValue:
    """Already a process handle; passed through so its cancel participates."""

    handle: ProcessHandle[Any]


@dataclass(frozen=True)
class LeafValue:
    """A plain value or a single awaitable."""

    value: Any


@dataclass(frozen=True)
class SequenceValue:
    """An ordered list or tuple; ``rebuild`` restores the container type."""

    items: tuple[Any, ...]
    rebuild: Callable[[list[Any]], Any]


@dataclass(frozen=True)
class KeyedValue:
    """A mapping; keys are captured in iteration order."""

    keys: tuple[Any, ...]
    values: tuple[Any, ...]


@dataclass(frozen=True)
class SuspendedValue:
    """A nested generator (or generator-shaped object)."""

    generator: Any


Classified: TypeAlias = ProcessValue | LeafValue | SequenceValue | KeyedValue | SuspendedValue


def is_generator_like(value: Any) -> bool:
    """Check if value exposes the generator protocol (send/throw/close)."""
    if inspect.isgenerator(value):
        return True
    return all(callable(getattr(value, name, None)) for name in ("send", "throw", "close"))


def classify(value: Any) -> Classified:
    """Classify ``value`` for resolution.

    Order matters: awaitables are leaves even when they also look like
    generators (coroutine objects do), and strings are never sequences.
    """
    if isinstance(value, ProcessHandle):
        return ProcessValue(value)
    if value is None or isinstance(value, (str, bytes, bytearray)) or inspect.isawaitable(value):
        return LeafValue(value)
    if isinstance(value, list):
        return SequenceValue(tuple(value), list)
    if isinstance(value, tuple):
        # namedtuples keep their type
        rebuild = getattr(type(value), "_make", tuple)
        return SequenceValue(tuple(value), rebuild)
    if is_generator_like(value):
        return SuspendedValue(value)
    if isinstance(value, Mapping):
        keys = tuple(value.keys())
        return KeyedValue(keys, tuple(value[key] for key in keys))
    return LeafValue(value)


__all__ = [
    "Classified",
    "KeyedValue",
    "LeafValue",
    "ProcessValue",
    "SequenceValue",
    "SuspendedValue",
    "classify",
    "is_generator_like",
]
