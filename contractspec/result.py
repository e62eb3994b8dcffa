"""
contractspec.result

Purpose:
    Tagged result type shared by handlers, the input merger and the client caller.
    A value is either Ok(value) or Err(error); nothing in the pipeline raises for
    expected failures.

Author:
    Kanir Pandya

Created:
    2026-03-02
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        if isinstance(self.error, BaseException):
            raise self.error
        raise ValueError(f"unwrap() called on Err({self.error!r})")


Result = Union[Ok[T], Err[E]]


def is_result(value: Any) -> bool:
    return isinstance(value, (Ok, Err))
