"""
Core type aliases for stateflow.

Transitions are plain generators: they ``yield`` values to be resolved
(awaitables, lists/tuples, mappings, nested generators or process handles)
and ``return`` the render function that turns a :class:`State` into output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Generator, Protocol, TypeAlias, TypeVar

from stateflow.coordinator import State

if TYPE_CHECKING:
    from stateflow.observable import Subscription

P = TypeVar("P")
S = TypeVar("S")
S_contra = TypeVar("S_contra", contravariant=True)
E_contra = TypeVar("E_contra", contravariant=True)

# Function responsible for rendering the state
RenderFunction: TypeAlias = Callable[[State[P, S]], S]
# Generator which is run to obtain the render function
Transition: TypeAlias = Generator[Any, Any, RenderFunction[P, S]]
# Transition constructor
Action: TypeAlias = Callable[[P], Transition[P, S]]


class Observer(Protocol[S_contra, E_contra]):
    """Receiver of coordinator events.

    Every method is optional at runtime; the registry only calls the ones an
    observer actually defines. The protocol lists the full surface for type
    checkers.
    """

    def start(self, subscription: Subscription) -> None: ...

    def next(self, value: S_contra) -> None: ...

    def error(self, error: E_contra) -> None: ...

    def complete(self) -> None: ...


__all__ = [
    "Action",
    "Observer",
    "RenderFunction",
    "Transition",
]
