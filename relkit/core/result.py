"""Result type threaded between release stages.

Every stage of a release (validate, generate, compose, push) returns either
``Ok(value)`` or ``Err(error)`` instead of raising, so the caller decides how
a failure is reported and which exit code it maps to.

Usage:
    match validate(repo, "1.2.3", config):
        case Ok(state):
            print(f"releasing from {state.branch}")
        case Err(error):
            print(f"error: {error.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful stage outcome."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed stage outcome carrying a typed error value."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[E]
