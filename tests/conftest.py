"""
Pytest configuration for stateflow tests.

Provides a recording observer and small coroutine helpers for building
transitions with controlled timing.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest


class RecordingObserver:
    """Observer that records every event it receives, in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []
        self.subscription = None

    def start(self, subscription: Any) -> None:
        self.subscription = subscription

    def next(self, value: Any) -> None:
        self.events.append(("next", value))

    def error(self, error: Any) -> None:
        self.events.append(("error", error))

    def complete(self) -> None:
        self.events.append(("complete", None))

    @property
    def values(self) -> list[Any]:
        return [payload for kind, payload in self.events if kind == "next"]

    @property
    def errors(self) -> list[Any]:
        return [payload for kind, payload in self.events if kind == "error"]


async def _delayed(value: Any, delay: float = 0.0) -> Any:
    await asyncio.sleep(delay)
    return value


async def _failing(error: BaseException, delay: float = 0.0) -> Any:
    await asyncio.sleep(delay)
    raise error


@pytest.fixture
def recorder() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def delayed():
    """``delayed(value, delay)`` -> coroutine returning ``value`` after ``delay`` seconds."""
    return _delayed


@pytest.fixture
def failing():
    """``failing(error, delay)`` -> coroutine raising ``error`` after ``delay`` seconds."""
    return _failing
