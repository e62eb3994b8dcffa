"""
tests.server.test_dispatcher

Purpose:
    Server state machine through the synchronous dispatch() entry point.

Covers:
    - Handler result -> HTTP status mapping
    - Output validation without coercion (500 OUTPUT_VALIDATION_ERROR)
    - Pass-through when no output schema is declared
    - Explicit HttpResponse values
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

import pytest
from pydantic import BaseModel
from starlette.datastructures import QueryParams

from contractspec.contracts.contract import Contract
from contractspec.errors import ContractError, HandlerError
from contractspec.result import Err, Ok
from contractspec.server import responses
from contractspec.server.dispatcher import DispatchOutcome, dispatch, query_mapping, respond


class UserId(BaseModel):
    id: int


class User(BaseModel):
    id: int
    name: str


class Role(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


class Member(BaseModel):
    id: int
    role: Role
    token: UUID
    joined_at: datetime


find_user = Contract.new().with_route("get", "/users/:id").with_input(params=UserId).with_output(User)


def _returning(value: Any):
    def handler(input, context):
        return value

    return handler


def _dispatch(handler, *, contract: Contract = find_user, params: dict | None = None) -> DispatchOutcome:
    return dispatch(contract, path_params=params or {"id": "123"}, handler=handler)


def test_find_user_success() -> None:
    outcome = _dispatch(lambda input, ctx: Ok({"id": input["id"], "name": "Alice"}))
    assert outcome.status == 200
    assert outcome.body == {"id": 123, "name": "Alice"}
    assert outcome.is_success


def test_find_user_output_mismatch_is_500() -> None:
    outcome = _dispatch(_returning(Ok({"id": "123", "name": "Alice"})))
    assert outcome.status == 500
    assert outcome.body["code"] == "OUTPUT_VALIDATION_ERROR"
    assert outcome.body["message"] == "Response validation failed"
    assert "id" in outcome.body["data"]


def test_output_missing_field_is_500() -> None:
    outcome = _dispatch(_returning(Ok({"id": 1})))
    assert outcome.status == 500
    assert outcome.body["data"] == {"name": ["Missing required field: name."]}


def test_output_accepts_json_forms_of_enums_uuids_and_datetimes() -> None:
    contract = Contract.new().with_route("get", "/members").with_output(list[Member])
    row = {
        "id": 1,
        "role": "admin",
        "token": "12345678-1234-5678-1234-567812345678",
        "joined_at": "2026-03-02T10:00:00",
    }
    outcome = dispatch(contract, handler=_returning(Ok([row])))
    assert (outcome.status, outcome.body) == (200, [row])


def test_output_still_rejects_wrong_types_and_unknown_enum_values() -> None:
    contract = Contract.new().with_route("get", "/members").with_output(list[Member])
    row = {
        "id": "1",
        "role": "owner",
        "token": "12345678-1234-5678-1234-567812345678",
        "joined_at": "2026-03-02T10:00:00",
    }
    outcome = dispatch(contract, handler=_returning(Ok([row])))
    assert outcome.status == 500
    assert set(outcome.body["data"]["0"]) == {"id", "role"}


def test_output_model_instance_is_accepted() -> None:
    outcome = _dispatch(_returning(Ok(User(id=1, name="Alice"))))
    assert (outcome.status, outcome.body) == (200, {"id": 1, "name": "Alice"})


@pytest.mark.parametrize(
    "result, status, code, message",
    [
        (Err(HandlerError.NOT_FOUND), 404, "NOT_FOUND", "Resource not found"),
        (Err(HandlerError.UNAUTHORIZED), 401, "UNAUTHORIZED", "Unauthorized"),
        (Err("Database unavailable"), 500, "INTERNAL_ERROR", "Database unavailable"),
        (Err("not_found"), 500, "INTERNAL_ERROR", "not_found"),
        (Err({"reason": "weird"}), 500, "INTERNAL_ERROR", "Internal server error"),
        (Err(RuntimeError("hidden")), 500, "INTERNAL_ERROR", "Internal server error"),
    ],
)
def test_handler_error_mapping(result, status: int, code: str, message: str) -> None:
    outcome = _dispatch(_returning(result))
    assert outcome.status == status
    assert outcome.body == {"code": code, "message": message}


def test_invalid_input_is_422() -> None:
    called = []
    outcome = _dispatch(lambda input, ctx: called.append(input), params={"id": "abc"})
    assert outcome.status == 422
    assert outcome.body["code"] == "VALIDATION_ERROR"
    assert outcome.body["message"] == "Validation failed"
    assert list(outcome.body["data"]) == ["id"]
    assert called == []


def test_non_result_return_is_500() -> None:
    outcome = _dispatch(_returning({"id": 1, "name": "raw dict"}))
    assert outcome.status == 500
    assert outcome.body == {"code": "INTERNAL_ERROR", "message": "Internal server error"}


def test_no_output_schema_passes_through() -> None:
    contract = Contract.new().with_route("get", "/anything")
    outcome = dispatch(contract, handler=_returning(Ok({"whatever": [1, "two", None]})))
    assert (outcome.status, outcome.body) == (200, {"whatever": [1, "two", None]})


def test_context_and_merged_input_reach_handler() -> None:
    seen = {}

    def handler(input, context):
        seen.update(input=input, context=context)
        return Ok({"id": 1, "name": "x"})

    dispatch(find_user, path_params={"id": "9"}, context="ctx", handler=handler)
    assert seen == {"input": {"id": 9}, "context": "ctx"}


def test_inline_handler_is_used() -> None:
    contract = find_user.with_handler(lambda input, ctx: Ok({"id": input["id"], "name": "inline"}))
    assert dispatch(contract, path_params={"id": "5"}).body == {"id": 5, "name": "inline"}


def test_missing_handler_raises() -> None:
    with pytest.raises(ContractError, match="No handler"):
        dispatch(find_user, path_params={"id": "1"})


def test_async_handler_requires_handle() -> None:
    async def handler(input, context):
        return Ok(None)

    with pytest.raises(ContractError, match="Async handlers"):
        _dispatch(handler)


def test_handler_exceptions_propagate() -> None:
    def handler(input, context):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        _dispatch(handler)


# ---- explicit HttpResponse values ----

def test_created_is_validated_against_output() -> None:
    outcome = respond(find_user, responses.created({"id": "1", "name": "x"}))
    assert outcome.status == 500
    outcome = respond(find_user, responses.created({"id": 1, "name": "x"}))
    assert (outcome.status, outcome.body) == (201, {"id": 1, "name": "x"})


def test_no_content_has_empty_body() -> None:
    outcome = respond(find_user, responses.no_content())
    assert outcome.status == 204
    assert outcome.empty
    response = outcome.to_response()
    assert response.status_code == 204
    assert response.body == b""


def test_error_helpers_send_default_body() -> None:
    outcome = respond(find_user, responses.not_found())
    assert (outcome.status, outcome.body) == (404, {"code": "NOT_FOUND", "message": "Not Found"})
    outcome = respond(find_user, responses.too_many_requests())
    assert outcome.body == {"code": "TOO_MANY_REQUESTS", "message": "Too Many Requests"}


def test_error_data_is_sent_as_is() -> None:
    outcome = respond(find_user, responses.status(410, {"message": "Resource has been removed"}))
    assert (outcome.status, outcome.body) == (410, {"message": "Resource has been removed"})
    outcome = respond(find_user, responses.conflict({"code": "TAKEN", "message": "Email already used"}))
    assert outcome.status == 409


def test_unknown_status_default_body() -> None:
    outcome = respond(find_user, responses.status(599))
    assert outcome.body == {"code": "HTTP_599", "message": "Error"}


def test_query_mapping_collects_repeated_keys() -> None:
    assert query_mapping(QueryParams("tag=a&tag=b&page=2")) == {"tag": ["a", "b"], "page": "2"}
