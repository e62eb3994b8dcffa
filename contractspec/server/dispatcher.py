"""
contractspec.server.dispatcher

Purpose:
    Server side of a contract: validate input, call the handler, validate the
    handler's result and turn the outcome into an HTTP response.

State machine:
    ValidatingInput -> CallingHandler -> ValidatingOutput -> Responding

    bad input                    -> 422 VALIDATION_ERROR        "Validation failed"
    Err(HandlerError.NOT_FOUND)  -> 404 NOT_FOUND               "Resource not found"
    Err(HandlerError.UNAUTHORIZED) -> 401 UNAUTHORIZED          "Unauthorized"
    Err("some message")          -> 500 INTERNAL_ERROR          "some message"
    Err(<anything else>)         -> 500 INTERNAL_ERROR          "Internal server error"
    bad output                   -> 500 OUTPUT_VALIDATION_ERROR "Response validation failed"

Notes:
    - dispatch() is synchronous and framework-agnostic (plain mappings in,
      DispatchOutcome out). handle() is the FastAPI/Starlette adapter and also
      accepts async handlers.
    - Output is validated WITHOUT coercion (strict JSON mode): a mismatched
      response shape is a server bug, so it is logged and reported as a 500,
      never as a 422.
    - handle() runs sync handlers in Starlette's threadpool.
    - Exceptions raised inside a handler are not caught here; the app's global
      exception handler owns them.

Author:
    Kanir Pandya

Created:
    2026-03-04
"""

from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Mapping

from fastapi.encoders import jsonable_encoder
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import QueryParams
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from contractspec.contracts.contract import Contract, Handler
from contractspec.contracts.error_contract import ErrorCode, ErrorResponse
from contractspec.errors import ContractError, HandlerError
from contractspec.inputs import validate_input
from contractspec.result import Err, Ok, Result
from contractspec.schema import dump_json_compatible, treefy_errors, validate
from contractspec.server.responses import HttpResponse, default_error_body

logger = logging.getLogger(__name__)

_HANDLER_ERRORS: dict[HandlerError, tuple[int, ErrorCode, str]] = {
    HandlerError.NOT_FOUND: (HTTPStatus.NOT_FOUND, ErrorCode.NOT_FOUND, "Resource not found"),
    HandlerError.UNAUTHORIZED: (HTTPStatus.UNAUTHORIZED, ErrorCode.UNAUTHORIZED, "Unauthorized"),
}


@dataclass(frozen=True)
class DispatchOutcome:
    status: int
    body: Any = None
    empty: bool = False

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    def to_response(self) -> Response:
        if self.empty:
            return Response(status_code=int(self.status))
        return JSONResponse(status_code=int(self.status), content=self.body)


def failure(status: int, code: ErrorCode, message: str, data: Any = None) -> DispatchOutcome:
    payload = ErrorResponse(code=code.value, message=message, data=data)
    return DispatchOutcome(status=int(status), body=payload.to_body())


def _input_failure(errors: list[dict[str, Any]]) -> DispatchOutcome:
    return failure(
        HTTPStatus.UNPROCESSABLE_ENTITY,
        ErrorCode.VALIDATION_ERROR,
        "Validation failed",
        treefy_errors(errors),
    )


def _resolve_handler(contract: Contract, handler: Handler | None) -> Handler:
    resolved = handler if handler is not None else contract.handler
    if resolved is None:
        raise ContractError(
            f"No handler for {contract.method.value.upper()} {contract.path}: "
            "pass one explicitly or build the contract with with_handler()."
        )
    return resolved


# ---------------------------------------------------------------------------
# ValidatingOutput / Responding
# ---------------------------------------------------------------------------

def _success(contract: Contract, value: Any, status: int = HTTPStatus.OK) -> DispatchOutcome:
    if contract.output is None:
        return DispatchOutcome(status=int(status), body=jsonable_encoder(value))

    result = validate(contract.output, value, coerce=False)
    if isinstance(result, Err):
        tree = treefy_errors(result.error)
        logger.error(
            "Output validation failed for %s %s: %s",
            contract.method.value.upper(),
            contract.path,
            tree,
        )
        return failure(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            ErrorCode.OUTPUT_VALIDATION_ERROR,
            "Response validation failed",
            tree,
        )

    return DispatchOutcome(status=int(status), body=dump_json_compatible(contract.output, result.value))


def _handler_error(contract: Contract, reason: Any) -> DispatchOutcome:
    if isinstance(reason, HandlerError):
        status, code, message = _HANDLER_ERRORS[reason]
        return failure(status, code, message)

    if isinstance(reason, str):
        return failure(HTTPStatus.INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR, reason)

    logger.warning(
        "Handler for %s %s returned unmapped error: %r",
        contract.method.value.upper(),
        contract.path,
        reason,
    )
    return failure(HTTPStatus.INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR, "Internal server error")


def _explicit_response(contract: Contract, response: HttpResponse) -> DispatchOutcome:
    if response.is_success:
        if response.data is None or response.status == HTTPStatus.NO_CONTENT:
            return DispatchOutcome(status=int(response.status), empty=True)
        return _success(contract, response.data, response.status)

    if response.data is None:
        return DispatchOutcome(status=int(response.status), body=default_error_body(response.status))
    return DispatchOutcome(status=int(response.status), body=jsonable_encoder(response.data))


def respond(contract: Contract, handler_result: Any) -> DispatchOutcome:
    """Map a handler's return value onto the final outcome."""
    if isinstance(handler_result, Ok):
        return _success(contract, handler_result.value)

    if isinstance(handler_result, Err):
        return _handler_error(contract, handler_result.error)

    if isinstance(handler_result, HttpResponse):
        return _explicit_response(contract, handler_result)

    logger.error(
        "Handler for %s %s returned %s; expected Ok, Err or HttpResponse",
        contract.method.value.upper(),
        contract.path,
        type(handler_result).__name__,
    )
    return failure(HTTPStatus.INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR, "Internal server error")


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def dispatch(
    contract: Contract,
    *,
    path_params: Mapping[str, Any] | None = None,
    query_params: Mapping[str, Any] | None = None,
    body_params: Any = None,
    context: Any = None,
    handler: Handler | None = None,
) -> DispatchOutcome:
    """
    Run one request through the contract (synchronous handlers only).

    *context* is passed to the handler as its second argument.
    """
    fn = _resolve_handler(contract, handler)

    validated = validate_input(contract.input, params=path_params, query=query_params, body=body_params)
    if isinstance(validated, Err):
        return _input_failure(validated.error)

    handler_result = fn(validated.value, context)
    if inspect.isawaitable(handler_result):
        if inspect.iscoroutine(handler_result):
            handler_result.close()
        raise ContractError("Async handlers are only supported through handle().")

    return respond(contract, handler_result)


def query_mapping(query_params: QueryParams) -> dict[str, Any]:
    """Flatten a query multi-dict; repeated keys become lists."""
    out: dict[str, Any] = {}
    for key in query_params.keys():
        values = query_params.getlist(key)
        out[key] = values if len(values) > 1 else values[0]
    return out


async def _read_json_body(request: Request) -> Result:
    raw = await request.body()
    if not raw or not raw.strip():
        return Ok({})
    try:
        return Ok(json.loads(raw))
    except ValueError:
        return Err([{"type": "json_invalid", "loc": ("body",), "msg": "Invalid JSON body."}])


async def handle(request: Request, contract: Contract, handler: Handler | None = None) -> Response:
    """
    FastAPI/Starlette entry point.

    Reads path params, query params and (only when a body schema is declared)
    the JSON body from *request*; the request itself is the handler context.
    Sync handlers run in the threadpool, async handlers on the event loop.
    """
    fn = _resolve_handler(contract, handler)

    body: Any = None
    if contract.input.body is not None:
        # a malformed body only fails once params and query have passed
        body = await _read_json_body(request)
        if isinstance(body, Ok):
            body = body.value

    validated = validate_input(
        contract.input,
        params=dict(request.path_params),
        query=query_mapping(request.query_params),
        body=body,
    )
    if isinstance(validated, Err):
        outcome = _input_failure(validated.error)
        logger.info(
            "Input validation failed for %s %s: %s",
            contract.method.value.upper(),
            contract.path,
            outcome.body.get("data"),
        )
        return outcome.to_response()

    if inspect.iscoroutinefunction(fn):
        handler_result = await fn(validated.value, request)
    else:
        handler_result = await run_in_threadpool(fn, validated.value, request)
        if inspect.isawaitable(handler_result):
            handler_result = await handler_result

    outcome = respond(contract, handler_result)
    logger.debug("%s %s -> %s", contract.method.value.upper(), contract.path, outcome.status)
    return outcome.to_response()
