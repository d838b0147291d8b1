"""Resolution of nested asynchronous values.

``resolve`` turns whatever a transition yields into a single process handle
whose result has the same shape with every awaitable replaced by its value:

    yield asyncio.sleep(0.1, "a")                    # -> "a"
    yield [fetch(1), fetch(2)]                       # -> [r1, r2]
    yield {"user": fetch_user(), "feed": feed()}     # -> {"user": u, "feed": f}
    yield nested_transition()                        # -> its return value

All children of a list, tuple or mapping are issued before any of them is
awaited, so independent branches run concurrently. Output order and keys
always follow the input.
"""

from __future__ import annotations

from typing import Any

from stateflow.classification import (
    KeyedValue,
    LeafValue,
    ProcessValue,
    SequenceValue,
    SuspendedValue,
    classify,
)
from stateflow.process import FanOutProcess, LeafProcess, ProcessHandle


def _keyed_assembler(keys: tuple[Any, ...]):
    def assemble(results: list[Any]) -> dict[Any, Any]:
        return dict(zip(keys, results))

    return assemble


def resolve(value: Any) -> ProcessHandle[Any]:
    """Start resolving ``value`` and return the handle of its resolution.

    Must be called with a running event loop.
    """
    match classify(value):
        case ProcessValue(handle):
            return handle
        case LeafValue(leaf):
            return LeafProcess.of(leaf)
        case SequenceValue(items, rebuild):
            return FanOutProcess([resolve(item) for item in items], rebuild)
        case KeyedValue(keys, values):
            return FanOutProcess([resolve(item) for item in values], _keyed_assembler(keys))
        case SuspendedValue(generator):
            from stateflow.runner import run_transition

            return run_transition(generator)
    raise TypeError(f"Unclassifiable value: {value!r}")


async def resolve_value(value: Any) -> Any:
    """Resolve ``value`` and wait for the fully resolved structure."""
    return await resolve(value)


__all__ = [
    "resolve",
    "resolve_value",
]
