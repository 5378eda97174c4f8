"""Ok/Err values for every fallible step of an upload.

Reading git, sending a payload and flushing metrics all return a Result
instead of raising. Callers decide what a failure means for the run, which
keeps partial-failure handling in the orchestrator.

Usage:
    match repo.head_sha():
        case Ok(sha):
            console.info(f"HEAD is {sha}")
        case Err(error):
            console.warning(f"git failed: {error.message}")
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
F = TypeVar("F")

__all__ = ["Err", "Ok", "Result"]


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    def map_err(self, f: Callable[..., object]) -> Ok[T]:
        del f
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        """Translate the error at a layer seam, e.g. GitError -> UploadError."""
        return Err(f(self.error))

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]
