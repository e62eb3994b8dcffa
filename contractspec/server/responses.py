"""
contractspec.server.responses

Purpose:
    Explicit HTTP response values a handler may return instead of Ok/Err when it
    needs a status other than 200.

Notes:
    - 2xx data is validated against the contract's output schema, like Ok(value).
    - 204 (or data=None on a 2xx) sends an empty body.
    - Non-2xx data is sent as-is; with data=None the standard error body is sent
      (code = status name, message = reason phrase).

Example:
    def find_user(input, request):
        user = store.get(input["id"])
        return responses.ok(user) if user else responses.not_found()

Author:
    Kanir Pandya

Created:
    2026-03-04
"""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any


@dataclass(frozen=True)
class HttpResponse:
    status: int
    data: Any = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300


# Success responses (2xx)

def ok(data: Any) -> HttpResponse:
    return HttpResponse(HTTPStatus.OK, data)


def created(data: Any) -> HttpResponse:
    return HttpResponse(HTTPStatus.CREATED, data)


def accepted(data: Any = None) -> HttpResponse:
    return HttpResponse(HTTPStatus.ACCEPTED, data)


def no_content() -> HttpResponse:
    return HttpResponse(HTTPStatus.NO_CONTENT)


# Client error responses (4xx)

def bad_request(data: Any = None) -> HttpResponse:
    return HttpResponse(HTTPStatus.BAD_REQUEST, data)


def unauthorized() -> HttpResponse:
    return HttpResponse(HTTPStatus.UNAUTHORIZED)


def forbidden() -> HttpResponse:
    return HttpResponse(HTTPStatus.FORBIDDEN)


def not_found() -> HttpResponse:
    return HttpResponse(HTTPStatus.NOT_FOUND)


def conflict(data: Any = None) -> HttpResponse:
    return HttpResponse(HTTPStatus.CONFLICT, data)


def unprocessable_entity(data: Any = None) -> HttpResponse:
    return HttpResponse(HTTPStatus.UNPROCESSABLE_ENTITY, data)


def too_many_requests() -> HttpResponse:
    return HttpResponse(HTTPStatus.TOO_MANY_REQUESTS)


# Server error responses (5xx)

def internal_server_error() -> HttpResponse:
    return HttpResponse(HTTPStatus.INTERNAL_SERVER_ERROR)


def service_unavailable() -> HttpResponse:
    return HttpResponse(HTTPStatus.SERVICE_UNAVAILABLE)


def status(code: int, data: Any = None) -> HttpResponse:
    """Any other status, e.g. status(410, {"message": "Resource has been removed"})."""
    return HttpResponse(int(code), data)


def default_error_body(code: int) -> dict[str, str]:
    try:
        http_status = HTTPStatus(code)
    except ValueError:
        return {"code": f"HTTP_{code}", "message": "Error"}
    return {"code": http_status.name, "message": http_status.phrase}
