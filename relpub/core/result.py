"""Result type for explicit error handling.

Every release step returns ``Ok(value)`` or ``Err(error)`` instead of raising,
so the run loop can stop at the first failure and report it.

Usage:
    match rewrite_manifest(path, "1.2.3", settings=settings):
        case Ok(rewrite):
            print(f"version: {rewrite.previous} -> {rewrite.version}")
        case Err(error):
            print(f"failed: {error.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
