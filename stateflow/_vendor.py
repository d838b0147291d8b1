"""
Vendored minimal outcome types shared by the runner and the coordinator.

``Result`` carries the settlement of a pending step (the value to resume a
transition with, or the error to throw into it). ``FrozenDict`` backs the
immutable parameter snapshots kept by :class:`stateflow.coordinator.State`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar

from frozendict import frozendict

# =========================================================
# Type Vars
# =========================================================
T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Result(Generic[T_co]):
    """Settlement of a pending step; consumers ``match`` on ``Ok``/``Err``."""

    __slots__ = ()


@dataclass(frozen=True)
class Ok(Result[T], Generic[T]):
    """Success result."""
    value: T


@dataclass(frozen=True)
class Err(Result[NoReturn]):
    """Error result.

    Holds ``BaseException`` so that ``asyncio.CancelledError`` from a
    cancelled child can be thrown back into a transition.
    """
    error: BaseException


# =========================================================
# Frozen Dict
# =========================================================
FrozenDict = frozendict

__all__ = [
    "Err",
    "FrozenDict",
    "Ok",
    "Result",
]
