"""Typed success/failure values for fallible operations."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed outcome carrying an error."""

    error: E


Result = Ok[T] | Err[E]
