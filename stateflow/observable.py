"""Observer registry used by the coordinator to publish events."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class CallbackObserver:
    """Observer assembled from plain callbacks.

    Only the callbacks actually supplied become observer methods, so an
    observer without ``on_error`` does not count as handling failures.
    """

    def __init__(
        self,
        on_next: Callable[[Any], None] | None = None,
        on_error: Callable[[Any], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        if on_next is not None:
            self.next = on_next
        if on_error is not None:
            self.error = on_error
        if on_complete is not None:
            self.complete = on_complete


def _is_observer(candidate: Any) -> bool:
    return any(
        callable(getattr(candidate, name, None)) for name in ("start", "next", "error", "complete")
    )


class Subscription:
    """Handle returned by :meth:`SubscriptionRegistry.subscribe`."""

    __slots__ = ("_registry", "observer", "closed")

    def __init__(self, registry: SubscriptionRegistry, observer: Any) -> None:
        self._registry = registry
        self.observer = observer
        self.closed = False

    def unsubscribe(self) -> None:
        self._registry._remove(self)
        self.closed = True

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Subscription {state} observer={self.observer!r}>"


class SubscriptionRegistry:
    """Ordered list of observers.

    Dispatch iterates a snapshot taken at the start of each pass, in
    subscription order, so subscribing or unsubscribing from inside a
    callback only affects later events. Exceptions raised by a callback
    propagate to the dispatcher's caller.
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(
        self,
        observer: Any = None,
        on_error: Callable[[Any], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> Subscription:
        """Register an observer object, or callbacks ``(on_next, on_error, on_complete)``."""
        if observer is None or not _is_observer(observer):
            if observer is not None and not callable(observer):
                raise TypeError(
                    f"Expected an observer or a callable, got {type(observer).__name__}"
                )
            observer = CallbackObserver(observer, on_error, on_complete)
        elif on_error is not None or on_complete is not None:
            raise TypeError("Callbacks cannot be combined with an observer object")

        subscription = Subscription(self, observer)
        start = getattr(observer, "start", None)
        if callable(start):
            start(subscription)
        if not subscription.closed:
            self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        for index, candidate in enumerate(self._subscriptions):
            if candidate is subscription:
                del self._subscriptions[index]
                return

    def clear(self) -> None:
        for subscription in self._subscriptions:
            subscription.closed = True
        self._subscriptions.clear()

    def _dispatch(self, method: str, *args: Any) -> int:
        delivered = 0
        for subscription in list(self._subscriptions):
            callback = getattr(subscription.observer, method, None)
            if callable(callback):
                callback(*args)
                delivered += 1
        return delivered

    def next(self, value: Any) -> int:
        """Deliver ``value``; returns how many observers received it."""
        return self._dispatch("next", value)

    def error(self, error: Any) -> int:
        """Deliver ``error``; returns how many observers received it."""
        return self._dispatch("error", error)

    def complete(self) -> int:
        return self._dispatch("complete")


__all__ = [
    "CallbackObserver",
    "Subscription",
    "SubscriptionRegistry",
]
