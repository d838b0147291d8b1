"""
stateflow - Cancellable transitions and single-flight state coordination.

Actions are plain functions returning generators ("transitions"). A
transition yields whatever it needs resolved (awaitables, lists, tuples,
mappings or nested transitions), receives the resolved value back, and
finally returns a render function. The coordinator keeps at most one
transition live, cancels superseded ones and publishes rendered output to
its observers.

Example:
    >>> from stateflow import TransitionCoordinator
    >>>
    >>> def load_user(params):
    ...     user = yield fetch_user(params["id"])
    ...     posts, friends = yield [fetch_posts(user), fetch_friends(user)]
    ...     return lambda state: {"user": user, "posts": posts, "friends": friends}
    >>>
    >>> coordinator = TransitionCoordinator()
    >>> coordinator.subscribe(print)
    >>> await coordinator.mutate(load_user, {"id": 1})
"""

from stateflow._types_internal import Action, Observer, RenderFunction, Transition
from stateflow._vendor import Err, FrozenDict, Ok, Result
from stateflow.classification import classify
from stateflow.coordinator import State, TransitionCoordinator, UnhandledHook
from stateflow.errors import (
    ActionError,
    CancelledAction,
    CancelledError,
    CoordinatorClosedError,
)
from stateflow.observable import CallbackObserver, Subscription, SubscriptionRegistry
from stateflow.process import FanOutProcess, LeafProcess, ProcessHandle
from stateflow.resolve import resolve, resolve_value
from stateflow.runner import CoroutineProcess, run_transition
from stateflow.suspended import Done, SuspendedComputation, Yielded

__all__ = [
    # Types
    "Action",
    "Observer",
    "RenderFunction",
    "Transition",
    # Vendored types
    "Err",
    "FrozenDict",
    "Ok",
    "Result",
    # Coordinator
    "State",
    "TransitionCoordinator",
    "UnhandledHook",
    # Errors
    "ActionError",
    "CancelledAction",
    "CancelledError",
    "CoordinatorClosedError",
    # Observers
    "CallbackObserver",
    "Subscription",
    "SubscriptionRegistry",
    # Processes
    "CoroutineProcess",
    "FanOutProcess",
    "LeafProcess",
    "ProcessHandle",
    "run_transition",
    # Resolution
    "classify",
    "resolve",
    "resolve_value",
    # Suspended computations
    "Done",
    "SuspendedComputation",
    "Yielded",
]
