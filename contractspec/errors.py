"""
contractspec.errors

Purpose:
    Structured error types shared by the contract builder, the dispatcher and
    the client caller.

Notes:
    - ContractError is raised at build time (bad method, bad schema, bad handler).
    - ValidationError / RequestError / ServerError are client-side outcomes. They
      are returned inside Err(...) by ContractClient.call() and raised by
      ContractClient.call_or_raise().
    - All of them are frozen: one failure, one immutable value.

Author:
    Kanir Pandya

Created:
    2026-03-02
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from contractspec.schema import treefy_errors


class ContractError(ValueError):
    """Raised when a contract or client is built with invalid arguments."""


class Phase(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


class HandlerError(str, Enum):
    """
    Known handler failure sentinels.

    Return Err(HandlerError.NOT_FOUND) / Err(HandlerError.UNAUTHORIZED) from a
    handler to get the matching HTTP status. Plain strings are NOT sentinels:
    Err("not_found") is reported as a 500 with that message.
    """

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class ValidationError(Exception):
    phase: Phase
    errors: list[dict[str, Any]] = field(default_factory=list)
    message: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            text = "Input validation failed" if self.phase == Phase.INPUT else "Output validation failed"
            object.__setattr__(self, "message", text)

    @property
    def tree(self) -> dict[str, Any]:
        return treefy_errors(self.errors)

    def __str__(self) -> str:
        return f"{self.message}: {self.tree}"


@dataclass(frozen=True)
class RequestError(Exception):
    reason: BaseException
    message: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            object.__setattr__(self, "message", f"HTTP request failed: {self.reason!r}")

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ServerError(Exception):
    status: int
    message: str
    code: str | None = None
    data: Any = None

    def __str__(self) -> str:
        if self.code:
            return f"{self.status} {self.code}: {self.message}"
        return f"{self.status}: {self.message}"
