from __future__ import annotations

from typing import TYPE_CHECKING, Any

from stateflow.utils import action_name

if TYPE_CHECKING:
    from stateflow._types_internal import Action, RenderFunction


class ActionError(Exception):
    """Raised (or delivered to observers) when a transition fails.

    ``cause`` is the original failure; it is also chained as ``__cause__``.
    """

    def __init__(self, action: Action[Any, Any], params: Any, cause: BaseException | None) -> None:
        self.action = action
        self.params = params
        self.cause = cause
        super().__init__(self._describe())
        if cause is not None:
            self.__cause__ = cause

    def _describe(self) -> str:
        return f"Action {action_name(self.action)} failed for params {self.params!r}: {self.cause!r}"


class CancelledAction(ActionError):
    """A transition produced its render function but was superseded before it was applied."""

    def __init__(self, action: Action[Any, Any], params: Any, render: RenderFunction[Any, Any]) -> None:
        self.render = render
        super().__init__(action, params, None)

    def _describe(self) -> str:
        return f"Action {action_name(self.action)} was superseded before its result was applied"


class CancelledError(ActionError):
    """A transition failed (or was cancelled) after it had already been superseded.

    Not to be confused with :class:`asyncio.CancelledError`, which may be its ``cause``.
    """

    def _describe(self) -> str:
        return (
            f"Action {action_name(self.action)} was superseded; "
            f"its failure was discarded: {self.cause!r}"
        )


class CoordinatorClosedError(RuntimeError):
    """Raised when ``mutate`` is called on a closed coordinator."""

    def __init__(self) -> None:
        super().__init__(
            "TransitionCoordinator is closed\n"
            "Hint: create a new coordinator instead of reusing one after close()"
        )


__all__ = [
    "ActionError",
    "CancelledAction",
    "CancelledError",
    "CoordinatorClosedError",
]
