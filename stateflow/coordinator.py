"""
Single-flight transition coordinator.

``TransitionCoordinator.mutate(action, params)`` runs ``action(params)`` and,
once its transition returns a render function, renders a fresh
:class:`State` and publishes the output to every observer. Only one
transition is live at a time: a new ``mutate`` cancels the previous one, and
a transition that settles after being superseded is published as
:class:`~stateflow.errors.CancelledAction` or
:class:`~stateflow.errors.CancelledError` instead of being applied.

Example:
    def show_user(params):
        user = yield fetch_user(params["id"])
        return lambda state: render_profile(user, state)

    coordinator = TransitionCoordinator()
    coordinator.subscribe(print_view, show_error)
    await coordinator.mutate(show_user, {"id": 1})
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from stateflow._vendor import FrozenDict
from stateflow.errors import ActionError, CancelledAction, CancelledError, CoordinatorClosedError
from stateflow.observable import Subscription, SubscriptionRegistry
from stateflow.process import LeafProcess, ProcessHandle
from stateflow.resolve import resolve
from stateflow.utils import action_name

if TYPE_CHECKING:
    from stateflow._types_internal import Action, RenderFunction

logger = logging.getLogger(__name__)

P = TypeVar("P")
S = TypeVar("S")

UnhandledHook = Callable[[ActionError], None]


@dataclass(frozen=True)
class State(Generic[P, S]):
    """Immutable snapshot handed to a render function.

    Mapping params are frozen so ``reload()`` replays exactly what the
    action was run with.
    """

    coordinator: TransitionCoordinator[S] = field(repr=False, compare=False)
    action: Action[P, S]
    params: P

    def __post_init__(self) -> None:
        if isinstance(self.params, Mapping) and not isinstance(self.params, FrozenDict):
            object.__setattr__(self, "params", FrozenDict(self.params))

    def mutate(self, action: Action[Any, S], params: Any) -> asyncio.Task[None]:
        return self.coordinator.mutate(action, params)

    def reload(self) -> asyncio.Task[None]:
        return self.coordinator.mutate(self.action, self.params)


class TransitionCoordinator(Generic[S]):
    """Runs actions one at a time and publishes their rendered output.

    Args:
        on_unhandled: Called with the :class:`ActionError` of a failed
            transition that no observer received. Defaults to the running
            event loop's exception handler.

    All methods must be called from the event loop's thread; ``mutate``
    requires a running loop.
    """

    def __init__(self, on_unhandled: UnhandledHook | None = None) -> None:
        self._current: ProcessHandle[Any] | None = None
        self._observers = SubscriptionRegistry()
        self._on_unhandled = on_unhandled
        self._closed = False

    @property
    def current(self) -> ProcessHandle[Any] | None:
        """Handle of the live transition, if any."""
        return self._current

    @property
    def busy(self) -> bool:
        return self._current is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(
        self,
        observer: Any = None,
        on_error: Callable[[Any], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> Subscription:
        """Subscribe an observer object, or ``(on_next, on_error, on_complete)`` callbacks."""
        return self._observers.subscribe(observer, on_error, on_complete)

    def mutate(self, action: Action[P, S], params: P) -> asyncio.Task[None]:
        """Start ``action(params)``, superseding the live transition.

        The previous transition is cancelled and the new one started before
        this method returns. The returned task completes once the outcome has
        been published; it fails with the :class:`ActionError` only when a
        failure reached no observer.
        """
        if self._closed:
            raise CoordinatorClosedError()
        loop = asyncio.get_running_loop()

        # A cancelled transition may start another one from its finally block.
        while self._current is not None:
            previous, self._current = self._current, None
            logger.debug("%s supersedes %r", action_name(action), previous)
            previous.cancel()

        handle = self._start(action, params)
        if self._current is not None:
            # The first step of this action started a newer mutation.
            logger.debug("%s superseded during its first step", action_name(action))
            handle.cancel()
        else:
            self._current = handle
        return loop.create_task(self._settle(handle, action, params))

    def close(self) -> None:
        """Cancel the live transition, complete every observer and reject further mutations."""
        if self._closed:
            return
        self._closed = True
        current, self._current = self._current, None
        if current is not None:
            current.cancel()
        self._observers.complete()
        self._observers.clear()

    def _start(self, action: Action[P, S], params: P) -> ProcessHandle[Any]:
        try:
            transition = action(params)
        except Exception as exc:
            return LeafProcess.failed(exc)
        return resolve(transition)

    async def _settle(self, handle: ProcessHandle[Any], action: Action[P, S], params: P) -> None:
        try:
            render = await handle.wait()
        except asyncio.CancelledError as exc:
            if not handle.future.cancelled():
                # The caller cancelled this task, not the transition.
                if self._current is handle:
                    self._current = None
                handle.cancel()
                raise
            self._on_error(handle, action, params, exc)
            return
        except Exception as exc:
            self._on_error(handle, action, params, exc)
            return
        self._on_state(handle, action, params, render)

    def _on_state(
        self,
        handle: ProcessHandle[Any],
        action: Action[P, S],
        params: P,
        render: RenderFunction[P, S],
    ) -> None:
        if self._current is not handle:
            logger.debug("Discarding result of superseded %s", action_name(action))
            self._observers.error(CancelledAction(action, params, render))
            return

        self._current = None
        try:
            output = render(State(self, action, params))
        except Exception as exc:
            self._report_failure(action, params, exc)
            return
        self._observers.next(output)

    def _on_error(
        self,
        handle: ProcessHandle[Any],
        action: Action[P, S],
        params: P,
        cause: BaseException,
    ) -> None:
        if self._current is not handle:
            logger.debug("Discarding failure of superseded %s: %r", action_name(action), cause)
            self._observers.error(CancelledError(action, params, cause))
            return

        self._current = None
        self._report_failure(action, params, cause)

    def _report_failure(self, action: Action[P, S], params: P, cause: BaseException) -> None:
        error = ActionError(action, params, cause)
        if self._observers.error(error):
            return

        logger.debug("No observer handled failure of %s", action_name(action))
        if self._on_unhandled is not None:
            self._on_unhandled(error)
        else:
            asyncio.get_running_loop().call_exception_handler(
                {
                    "message": f"Unhandled failure in transition {action_name(action)}",
                    "exception": error,
                }
            )
        raise error


__all__ = [
    "State",
    "TransitionCoordinator",
    "UnhandledHook",
]
