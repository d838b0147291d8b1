"""Suspended computations: a uniform step interface over generators."""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass
from typing import Any, Generic, TypeAlias, TypeVar

R = TypeVar("R")


@dataclass(frozen=True)
class Yielded:
    """The computation suspended on ``value`` and waits to be resumed."""

    value: Any


@dataclass(frozen=True)
class Done(Generic[R]):
    """The computation returned ``value``."""

    value: R


Step: TypeAlias = Yielded | Done[Any]


class SuspendedComputation(Generic[R]):
    """Drives a generator one step at a time.

    ``resume`` sends a value, ``fail`` throws an error at the suspension
    point so the generator may recover with ``try``/``except``, and
    ``terminate`` closes it, running any ``finally`` regions. Exceptions the
    generator lets escape propagate to the caller.
    """

    __slots__ = ("_generator", "_finished")

    def __init__(self, generator: Generator[Any, Any, R]) -> None:
        self._generator = generator
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def resume(self, value: Any = None) -> Step:
        try:
            yielded = self._generator.send(value)
        except StopIteration as stop:
            self._finished = True
            return Done(stop.value)
        except BaseException:
            self._finished = True
            raise
        return Yielded(yielded)

    def fail(self, error: BaseException) -> Step:
        try:
            yielded = self._generator.throw(error)
        except StopIteration as stop:
            self._finished = True
            return Done(stop.value)
        except BaseException:
            self._finished = True
            raise
        return Yielded(yielded)

    def terminate(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._generator.close()


__all__ = [
    "Done",
    "Step",
    "SuspendedComputation",
    "Yielded",
]
