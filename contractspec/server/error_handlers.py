"""
contractspec.server.error_handlers

Purpose:
    Register global exception handlers so every failure that escapes a route
    (FastAPI's own request validation, unhandled handler exceptions) still
    returns the standard {"code", "message", "data"?} body.

Author:
    Kanir Pandya

Created:
    2026-02-15

Updated:
    2026-03-06
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from contractspec.contracts.error_contract import ErrorCode, ErrorResponse
from contractspec.schema import clean_errors, treefy_errors

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers on the FastAPI app.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        safe_errors = clean_errors(jsonable_encoder(exc.errors()))

        payload = ErrorResponse(
            code=ErrorCode.BAD_REQUEST.value,
            message="Request validation failed",
            data=treefy_errors(safe_errors),
        )
        return JSONResponse(status_code=422, content=payload.to_body())

    @app.exception_handler(Exception)
    async def handle_unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception in API request", exc_info=exc)

        payload = ErrorResponse(
            code=ErrorCode.INTERNAL_ERROR.value,
            message="Internal server error",
        )
        return JSONResponse(status_code=500, content=payload.to_body())
