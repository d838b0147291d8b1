"""
Transition runner.

A transition is a generator that yields values to be resolved and finally
returns its result (for actions, the render function). The runner resumes
the generator with each resolved value, or throws the failure into it so it
can recover locally, until the generator returns or raises.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Generator
from typing import Any, TypeVar

from stateflow._vendor import Err, Ok, Result
from stateflow.classification import is_generator_like
from stateflow.process import ProcessHandle, outcome_of
from stateflow.resolve import resolve
from stateflow.suspended import Done, Step, SuspendedComputation, Yielded
from stateflow.utils import DEBUG_TRANSITIONS, describe

logger = logging.getLogger(__name__)

R = TypeVar("R")


class CoroutineProcess(ProcessHandle[R]):
    """Process handle driving a transition generator.

    Each step runs synchronously inside a future callback; the generator is
    only ever resumed by the event loop's thread.

    ``cancel()`` closes the generator right away (running its ``finally``
    regions), then cancels the outstanding child resolution without waiting
    for it. If closing the generator raises, the process fails with that
    error instead of being cancelled. A cancel issued from inside the
    generator's own step closes it as soon as the step returns.
    """

    __slots__ = ("_cancel_deferred", "_computation", "_pending", "_stepping")

    def __init__(self, transition: Generator[Any, Any, R]) -> None:
        super().__init__(asyncio.get_running_loop().create_future())
        self._computation: SuspendedComputation[R] = SuspendedComputation(transition)
        self._pending: ProcessHandle[Any] | None = None
        self._stepping = False
        self._cancel_deferred = False

    @property
    def pending(self) -> ProcessHandle[Any] | None:
        """The child resolution the transition currently waits on."""
        return self._pending

    def start(self) -> CoroutineProcess[R]:
        self._advance(Ok(None))
        return self

    def _step(self, outcome: Result[Any]) -> Step:
        match outcome:
            case Ok(value):
                return self._computation.resume(value)
            case Err(error):
                return self._computation.fail(error)
        raise TypeError(f"Expected Ok or Err, got {outcome!r}")

    def _advance(self, outcome: Result[Any]) -> None:
        if self._future.done():
            return
        if DEBUG_TRANSITIONS:
            logger.debug("%r resumed with %s", self, describe(outcome))
        self._stepping = True
        try:
            step = self._step(outcome)
        except asyncio.CancelledError:
            self._future.cancel()
            return
        except Exception as exc:
            if DEBUG_TRANSITIONS:
                logger.debug("%r raised %r", self, exc)
            if not self._future.done():
                self._future.set_exception(exc)
            return
        finally:
            self._stepping = False

        if self._cancel_deferred:
            self.cancel()
            return
        if self._future.done():
            # the future itself was cancelled while the generator was executing
            self._terminate()
            return

        match step:
            case Done(value):
                if DEBUG_TRANSITIONS:
                    logger.debug("%r returned %s", self, describe(value))
                self._future.set_result(value)
            case Yielded(value):
                if DEBUG_TRANSITIONS:
                    logger.debug("%r yielded %s", self, describe(value))
                pending = resolve(value)
                self._pending = pending
                pending.future.add_done_callback(self._on_pending_settled)

    def _on_pending_settled(self, future: asyncio.Future[Any]) -> None:
        outcome = outcome_of(future)
        pending = self._pending
        if pending is None or pending.future is not future:
            return
        self._pending = None
        self._advance(outcome)

    def cancel(self) -> None:
        if self._stepping:
            # a running generator cannot be closed
            self._cancel_deferred = True
            return
        super().cancel()

    def _terminate(self) -> None:
        try:
            self._computation.terminate()
        except Exception as exc:
            if self._future.done():
                raise
            self._future.set_exception(exc)

    def _signal_cancel(self) -> None:
        pending, self._pending = self._pending, None
        logger.debug("Cancelling %r (pending=%r)", self, pending)
        self._terminate()
        if pending is not None:
            pending.cancel()


def run_transition(transition: Generator[Any, Any, R]) -> CoroutineProcess[R]:
    """Start driving ``transition`` and return its process handle.

    The first step runs synchronously; must be called with a running event loop.
    """
    if not is_generator_like(transition):
        raise TypeError(f"Expected a generator, got {type(transition).__name__}")
    return CoroutineProcess(transition).start()


__all__ = [
    "CoroutineProcess",
    "run_transition",
]
