"""
tests.client.test_caller

Purpose:
    Client state machine against httpx.MockTransport (no network).

Covers:
    - URL building, query/body encoding and header precedence
    - Response classification into ServerError
    - Transport failures -> RequestError
    - Input/output validation errors
    - call_or_raise and registry binding
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from contractspec.client.caller import ContractClient, build_url, call, call_or_raise, decode_body, server_error
from contractspec.demo.users_api import User, create_user, delete_user, find_user, list_users, update_user, users_api
from contractspec.errors import ContractError, Phase, RequestError, ServerError, ValidationError
from contractspec.result import Err, Ok


def _client(responder: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> tuple[ContractClient, list]:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return responder(request)

    client = ContractClient(
        base_url=kwargs.pop("base_url", "http://host/api/"),
        transport_options={"transport": httpx.MockTransport(handler)},
        **kwargs,
    )
    return client, seen


def _json(status: int, body: Any) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, json=body)


# ---- BuildingRequest ----

def test_build_url_joins_without_double_slash() -> None:
    assert build_url("http://host/api/", "/users", {}) == "http://host/api/users"
    assert build_url("http://host/api", "/users/:id", {"id": 5}) == "http://host/api/users/5"


def test_build_url_quotes_and_formats_values() -> None:
    assert build_url("http://h", "/files/:name", {"name": "a b/c"}) == "http://h/files/a%20b%2Fc"
    assert build_url("http://h", "/flags/:on", {"on": True}) == "http://h/flags/true"


def test_find_user_round_trip_coerces_output() -> None:
    client, seen = _client(_json(200, {"id": "123", "name": "Alice"}))
    result = client.call(find_user, {"id": "123"})
    assert result == Ok(User(id=123, name="Alice"))
    assert seen[0].method == "GET"
    assert str(seen[0].url) == "http://host/api/users/123"
    assert seen[0].content == b""


def test_query_defaults_are_sent() -> None:
    client, seen = _client(_json(200, []))
    assert client.call(list_users) == Ok([])
    assert dict(seen[0].url.params) == {"page": "1", "page_size": "20"}


def test_body_and_query_are_split_by_schema() -> None:
    client, seen = _client(_json(200, {"id": 7, "name": "Ann"}))
    result = client.call(update_user, {"id": 7, "name": "Ann", "notify": True})
    assert result == Ok(User(id=7, name="Ann"))
    request = seen[0]
    assert request.method == "PUT"
    assert request.url.path == "/api/users/7"
    assert dict(request.url.params) == {"notify": "true"}
    assert json.loads(request.content) == {"name": "Ann", "email": None}


def test_post_sends_json_body() -> None:
    client, seen = _client(_json(201, {"id": 1, "name": "Bob"}))
    assert client.call(create_user, {"name": " Bob "}) == Ok(User(id=1, name="Bob"))
    assert seen[0].headers["content-type"] == "application/json"
    assert json.loads(seen[0].content) == {"name": "Bob", "email": None}


def test_client_headers_override_call_headers() -> None:
    client, seen = _client(_json(200, []), headers={"authorization": "Bearer client"})
    client.call(list_users, headers={"authorization": "Bearer call", "x-trace": "t1"})
    assert seen[0].headers["authorization"] == "Bearer client"
    assert seen[0].headers["x-trace"] == "t1"


def test_per_call_transport_options_go_to_request() -> None:
    calls = []

    class RecordingClient:
        def request(self, method, url, **kwargs):
            calls.append((method, url, kwargs))
            return httpx.Response(204)

    client = ContractClient(base_url="http://h", headers={"x-a": "1"}, http_client=RecordingClient())
    assert client.call(delete_user, {"id": 3}, transport_options={"timeout": 2.0}) == Ok(None)
    method, url, kwargs = calls[0]
    assert (method, url) == ("DELETE", "http://h/users/3")
    assert kwargs == {"timeout": 2.0, "headers": {"x-a": "1"}}


# ---- ClassifyingResponse ----

def test_not_found_becomes_server_error() -> None:
    client, _ = _client(_json(404, {"code": "NOT_FOUND", "message": "User not found"}))
    result = client.call(find_user, {"id": 999})
    assert result == Err(ServerError(status=404, code="NOT_FOUND", message="User not found"))


def test_server_error_keeps_data() -> None:
    body = {"code": "VALIDATION_ERROR", "message": "Validation failed", "data": {"id": ["bad"]}}
    client, _ = _client(_json(422, body))
    err = client.call(find_user, {"id": 1}).error
    assert (err.status, err.code, err.data) == (422, "VALIDATION_ERROR", {"id": ["bad"]})


def test_server_error_without_message() -> None:
    assert server_error(500, {}) == ServerError(status=500, message="Server error")


def test_non_mapping_error_body() -> None:
    client, _ = _client(lambda request: httpx.Response(502, text="bad gateway"))
    err = client.call(find_user, {"id": 1}).error
    assert err == ServerError(status=502, message="Server error: 'bad gateway'", code=None)


def test_decode_body() -> None:
    assert decode_body(httpx.Response(200)) is None
    assert decode_body(httpx.Response(200, text="plain")) == "plain"
    assert decode_body(httpx.Response(200, json=[1])) == [1]


def test_no_output_schema_returns_body_as_is() -> None:
    client, _ = _client(_json(200, {"anything": True}))
    assert client.call(delete_user, {"id": 1}) == Ok({"anything": True})


# ---- failures ----

def test_transport_failure_is_request_error() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = _client(refuse)
    result = client.call(find_user, {"id": 1})
    assert isinstance(result, Err)
    assert isinstance(result.error, RequestError)
    assert isinstance(result.error.reason, httpx.ConnectError)


def test_invalid_input_never_hits_transport() -> None:
    client, seen = _client(_json(200, {}))
    result = client.call(find_user, {"id": "abc"})
    assert isinstance(result.error, ValidationError)
    assert result.error.phase is Phase.INPUT
    assert list(result.error.tree) == ["id"]
    assert seen == []


def test_invalid_output_fails_closed() -> None:
    client, _ = _client(_json(200, {"id": "abc"}))
    err = client.call(find_user, {"id": 1}).error
    assert isinstance(err, ValidationError)
    assert err.phase is Phase.OUTPUT
    assert set(err.tree) == {"id", "name"}


def test_call_or_raise() -> None:
    client, _ = _client(_json(200, {"id": 1, "name": "Alice"}))
    assert client.call_or_raise(find_user, {"id": 1}) == User(id=1, name="Alice")

    client, _ = _client(_json(404, {"code": "NOT_FOUND", "message": "User not found"}))
    with pytest.raises(ServerError) as exc_info:
        client.call_or_raise(find_user, {"id": 1})
    assert exc_info.value.status == 404


# ---- binding ----

def test_bind_exposes_named_calls() -> None:
    client, seen = _client(_json(200, {"id": 1, "name": "Alice"}))
    api = client.bind(users_api)
    assert api.find_user({"id": 1}) == Ok(User(id=1, name="Alice"))
    assert api.find_user_or_raise({"id": 1}) == User(id=1, name="Alice")
    assert api.client is client
    assert {"find_user", "find_user_or_raise"} <= set(dir(api))
    with pytest.raises(AttributeError):
        api.drop_database


# ---- construction ----

@pytest.mark.parametrize("base_url", [None, "", "   ", "/"])
def test_base_url_is_required(base_url) -> None:
    with pytest.raises(ContractError, match="Invalid client options"):
        ContractClient(base_url=base_url)


def test_headers_must_be_strings() -> None:
    with pytest.raises(ContractError):
        ContractClient(base_url="http://h", headers={"x-count": object()})


def test_client_is_immutable() -> None:
    client = ContractClient(base_url="http://h/")
    assert client.base_url == "http://h"
    with pytest.raises(AttributeError):
        client.base_url = "http://other"  # type: ignore[misc]


def test_module_level_entry_points() -> None:
    client, _ = _client(_json(200, {"id": 4, "name": "Dee"}))
    assert call(client, find_user, {"id": 4}) == Ok(User(id=4, name="Dee"))
    assert call_or_raise(client, find_user, {"id": 4}) == User(id=4, name="Dee")
