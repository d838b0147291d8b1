"""
Process handles: cancellable wrappers around pending results.

A handle owns a completion future and exposes an idempotent ``cancel()``.
Handles are compared by identity only; the coordinator relies on this to
tell whether a settling handle is still the live one.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Generator, Sequence
from typing import Any, Generic, TypeVar

from stateflow._vendor import Err, Ok, Result

T = TypeVar("T")


def outcome_of(future: asyncio.Future[Any]) -> Result[Any]:
    """Convert a settled future into ``Ok``/``Err``; cancellation becomes ``Err(CancelledError)``."""

    if future.cancelled():
        return Err(asyncio.CancelledError())
    error = future.exception()
    if error is not None:
        return Err(error)
    return Ok(future.result())


class ProcessHandle(Generic[T]):
    """Identity-bearing handle to a pending result.

    ``await handle`` (or ``await handle.wait()``) yields the result. Waiting
    is shielded: cancelling a waiter does not cancel the handle. After
    ``cancel()`` on an unsettled handle, waiting raises
    ``asyncio.CancelledError``.
    """

    __slots__ = ("_future", "_cancel_requested")

    def __init__(self, future: asyncio.Future[T]) -> None:
        self._future = future
        self._cancel_requested = False

    @property
    def future(self) -> asyncio.Future[T]:
        return self._future

    def done(self) -> bool:
        return self._future.done()

    async def wait(self) -> T:
        return await asyncio.shield(self._future)

    def __await__(self) -> Generator[Any, None, T]:
        return self.wait().__await__()

    def cancel(self) -> None:
        """Signal cancellation. Idempotent, and a no-op once settled."""
        if self._cancel_requested or self._future.done():
            return
        self._cancel_requested = True
        self._signal_cancel()
        if not self._future.done():
            self._future.cancel()

    def _signal_cancel(self) -> None:
        """Propagate cancellation to whatever produces the result."""

    def __repr__(self) -> str:
        if self._future.cancelled():
            status = "cancelled"
        elif self._future.done():
            status = "done"
        else:
            status = "pending"
        return f"<{type(self).__name__} {status} at {id(self):#x}>"


class LeafProcess(ProcessHandle[T]):
    """Handle over a single future.

    Plain values are wrapped in an already-resolved future, which makes
    ``cancel()`` a no-op. Awaitables are scheduled immediately; cancelling
    the handle cancels the scheduled future.
    """

    __slots__ = ()

    @classmethod
    def of(cls, value: Any) -> LeafProcess[Any]:
        if inspect.isawaitable(value):
            return cls(asyncio.ensure_future(value))
        future = asyncio.get_running_loop().create_future()
        future.set_result(value)
        return cls(future)

    @classmethod
    def failed(cls, error: BaseException) -> LeafProcess[Any]:
        future = asyncio.get_running_loop().create_future()
        future.set_exception(error)
        return cls(future)


class FanOutProcess(ProcessHandle[T]):
    """Handle combining child handles into one result.

    Children settle in any order; ``assemble`` receives their results in
    child order. The first observed failure fails the whole process with the
    error of the lowest-indexed child that has failed by then. A cancelled
    child cancels the whole process. ``cancel()`` forwards to every child
    without waiting for them.
    """

    __slots__ = ("_children", "_assemble", "_remaining")

    def __init__(
        self,
        children: Sequence[ProcessHandle[Any]],
        assemble: Callable[[list[Any]], T],
    ) -> None:
        super().__init__(asyncio.get_running_loop().create_future())
        self._children = tuple(children)
        self._assemble = assemble
        self._remaining = len(self._children)
        if not self._children:
            self._future.set_result(assemble([]))
            return
        for child in self._children:
            child.future.add_done_callback(self._on_child_settled)

    @property
    def children(self) -> tuple[ProcessHandle[Any], ...]:
        return self._children

    def _on_child_settled(self, future: asyncio.Future[Any]) -> None:
        # Always retrieve the exception so late failures are not reported as unretrieved.
        failed = future.cancelled() or future.exception() is not None
        if self._future.done():
            return
        if future.cancelled():
            self._future.cancel()
            return
        if failed:
            self._future.set_exception(self._first_failure())
            return
        self._remaining -= 1
        if self._remaining:
            return
        try:
            value = self._assemble([child.future.result() for child in self._children])
        except Exception as exc:
            self._future.set_exception(exc)
            return
        self._future.set_result(value)

    def _first_failure(self) -> BaseException:
        for child in self._children:
            future = child.future
            if future.done() and not future.cancelled() and future.exception() is not None:
                return future.exception()
        raise RuntimeError("FanOutProcess has no failed child")

    def _signal_cancel(self) -> None:
        for child in self._children:
            child.cancel()


__all__ = [
    "FanOutProcess",
    "LeafProcess",
    "ProcessHandle",
    "outcome_of",
]
