"""
contractspec.contracts.error_contract

Purpose:
    Stable error contract for contract-driven endpoints (codes + wire model).
    Used by the dispatcher and the global exception handlers so every failure
    body has the same {"code", "message", "data"?} shape.

Author:
    Kanir Pandya

Created:
    2026-02-15

Updated:
    2026-03-02
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    # Input / output contract
    VALIDATION_ERROR = "VALIDATION_ERROR"
    OUTPUT_VALIDATION_ERROR = "OUTPUT_VALIDATION_ERROR"

    # Handler domain errors
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Generic
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BAD_REQUEST = "BAD_REQUEST"


class ErrorResponse(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    data: Any | None = Field(default=None, description="Optional field-level error tree")

    def to_body(self) -> dict[str, Any]:
        """Wire body; `data` is omitted entirely when there is nothing to report."""
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            body["data"] = self.data
        return body
