"""
contractspec.client.caller

Purpose:
    Client side of a contract: validate input, build and send the HTTP request
    with httpx, classify the response and validate the output.

State machine:
    ValidatingInput -> BuildingRequest -> Transporting -> ClassifyingResponse -> ValidatingOutput

    bad input            -> Err(ValidationError(phase=INPUT))
    transport failure    -> Err(RequestError(reason=<httpx error>))   (no retry)
    non-2xx response     -> Err(ServerError(status, code, message, data))
    bad output           -> Err(ValidationError(phase=OUTPUT))        (fail closed)
    success              -> Ok(validated_output)

Notes:
    - The caller passes ONE flat input mapping; every declared source schema
      (params / query / body) validates it and keeps its own fields.
    - Configured client headers win over per-call headers.
    - Client transport_options go to httpx.Client(...); per-call
      transport_options go to httpx.Client.request(...).
    - A ContractClient is immutable and safe to share between threads.

Usage:
    client = ContractClient(base_url="http://localhost:8000/api")
    result = client.call(find_user, {"id": 123})
    user = client.call_or_raise(find_user, {"id": 123})

Author:
    Kanir Pandya

Created:
    2026-03-05
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Mapping, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import to_jsonable_python

from contractspec.client.config import ClientConfig
from contractspec.contracts.contract import PATH_PARAM_PREFIX, Contract
from contractspec.errors import ContractError, Phase, RequestError, ServerError, ValidationError
from contractspec.inputs import ValidatedSources, validate_sources
from contractspec.result import Err, Ok, Result
from contractspec.schema import clean_errors, validate

logger = logging.getLogger(__name__)

OR_RAISE_SUFFIX = "_or_raise"


# ---------------------------------------------------------------------------
# BuildingRequest helpers
# ---------------------------------------------------------------------------

def _path_value(value: Any) -> str:
    value = to_jsonable_python(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_url(base_url: str, path: str, params: Mapping[str, Any]) -> str:
    """
    Substitute ":name" path segments and join with the base URL.

    The base URL's trailing slash is dropped and the path keeps its leading
    slash, so "http://host/api/" + "/users" == "http://host/api/users".
    """
    segments = []
    for segment in path.split("/"):
        name = segment[len(PATH_PARAM_PREFIX) :] if segment.startswith(PATH_PARAM_PREFIX) else None
        if name and name in params:
            segments.append(quote(_path_value(params[name]), safe=""))
        else:
            segments.append(segment)
    return base_url.rstrip("/") + "/".join(segments)


def build_query(query: Mapping[str, Any]) -> dict[str, Any]:
    encoded = to_jsonable_python(dict(query))
    return {k: v for k, v in encoded.items() if v is not None}


def build_body(body: Mapping[str, Any]) -> dict[str, Any]:
    return to_jsonable_python(dict(body))


# ---------------------------------------------------------------------------
# ClassifyingResponse helpers
# ---------------------------------------------------------------------------

def decode_body(response: httpx.Response) -> Any:
    """JSON when possible; empty body -> None; anything else -> text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def server_error(status: int, body: Any) -> ServerError:
    if isinstance(body, Mapping):
        return ServerError(
            status=status,
            code=body.get("code"),
            message=body.get("message") or "Server error",
            data=body.get("data"),
        )
    return ServerError(status=status, message=f"Server error: {body!r}")


def is_success_status(status: int) -> bool:
    return 200 <= status < 300


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ContractClient:
    base_url: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    transport_options: Mapping[str, Any] = field(default_factory=dict)
    http_client: Optional[httpx.Client] = None

    def __post_init__(self) -> None:
        try:
            config = ClientConfig(
                base_url=self.base_url,
                headers=dict(self.headers or {}),
                transport_options=dict(self.transport_options or {}),
            )
        except PydanticValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in clean_errors(exc.errors(include_url=False))
            )
            raise ContractError(f"Invalid client options: {details}") from exc

        object.__setattr__(self, "base_url", config.base_url)
        object.__setattr__(self, "headers", dict(config.headers))
        object.__setattr__(self, "transport_options", dict(config.transport_options))

    @classmethod
    def from_config(cls, config: ClientConfig, *, http_client: httpx.Client | None = None) -> "ContractClient":
        return cls(
            base_url=config.base_url,
            headers=config.headers,
            transport_options=config.transport_options,
            http_client=http_client,
        )

    @classmethod
    def from_env(cls) -> "ContractClient":
        return cls.from_config(ClientConfig.from_env())

    # ---- public API ----

    def call(
        self,
        contract: Contract,
        input: Mapping[str, Any] | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        transport_options: Mapping[str, Any] | None = None,
    ) -> Result:
        """Call *contract*'s endpoint. Returns Ok(output) or Err(error); never raises for expected failures."""
        validated = self._validate_input(contract, input)
        if isinstance(validated, Err):
            return validated

        response = self._send(contract, validated.value, headers=headers, transport_options=transport_options)
        if isinstance(response, Err):
            return response

        return self._handle_response(contract, response.value)

    def call_or_raise(
        self,
        contract: Contract,
        input: Mapping[str, Any] | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        transport_options: Mapping[str, Any] | None = None,
    ) -> Any:
        """Same as call() but raises ValidationError / RequestError / ServerError."""
        result = self.call(contract, input, headers=headers, transport_options=transport_options)
        if isinstance(result, Err):
            raise result.error
        return result.value

    def bind(self, contracts: Mapping[str, Contract]) -> "BoundClient":
        return BoundClient(self, contracts)

    # ---- steps ----

    def _validate_input(self, contract: Contract, input: Mapping[str, Any] | None) -> Result:
        raw = dict(input or {})
        result = validate_sources(contract.input, params=raw, query=raw, body=raw)
        if isinstance(result, Err):
            return Err(ValidationError(phase=Phase.INPUT, errors=result.error))
        return result

    def _send(
        self,
        contract: Contract,
        sources: ValidatedSources,
        *,
        headers: Mapping[str, str] | None,
        transport_options: Mapping[str, Any] | None,
    ) -> Result:
        method = contract.method.value.upper()
        url = build_url(self.base_url, contract.path, sources.params)

        request_kwargs: dict[str, Any] = dict(transport_options or {})
        request_kwargs["headers"] = {**dict(headers or {}), **self.headers}

        query = build_query(sources.query)
        if query:
            request_kwargs["params"] = query

        body = build_body(sources.body)
        if body:
            request_kwargs["json"] = body

        logger.debug("contract call: %s %s query=%s has_body=%s", method, url, query, bool(body))

        try:
            if self.http_client is not None:
                response = self.http_client.request(method, url, **request_kwargs)
            else:
                with httpx.Client(**self.transport_options) as http_client:
                    response = http_client.request(method, url, **request_kwargs)
        except httpx.RequestError as exc:
            logger.warning("contract call failed: %s %s: %r", method, url, exc)
            return Err(RequestError(reason=exc))

        return Ok(response)

    def _handle_response(self, contract: Contract, response: httpx.Response) -> Result:
        body = decode_body(response)

        if not is_success_status(response.status_code):
            return Err(server_error(response.status_code, body))

        if contract.output is None:
            return Ok(body)

        result = validate(contract.output, body, coerce=True)
        if isinstance(result, Err):
            return Err(ValidationError(phase=Phase.OUTPUT, errors=result.error))
        return result


class BoundClient:
    """
    Named call functions for a registry of contracts.

        api = client.bind(users_api)
        api.find_user({"id": 1})            # -> Ok(...) | Err(...)
        api.find_user_or_raise({"id": 1})   # -> value, raises on error
    """

    def __init__(self, client: ContractClient, contracts: Mapping[str, Contract]) -> None:
        self._client = client
        self._contracts = dict(contracts)

    @property
    def client(self) -> ContractClient:
        return self._client

    def __getattr__(self, name: str) -> Callable[..., Any]:
        contracts = self.__dict__.get("_contracts", {})
        if name in contracts:
            return partial(self._client.call, contracts[name])
        if name.endswith(OR_RAISE_SUFFIX) and name[: -len(OR_RAISE_SUFFIX)] in contracts:
            return partial(self._client.call_or_raise, contracts[name[: -len(OR_RAISE_SUFFIX)]])
        raise AttributeError(f"No contract named {name!r}")

    def __dir__(self) -> list[str]:
        names = list(self._contracts)
        return sorted(set(super().__dir__()) | set(names) | {n + OR_RAISE_SUFFIX for n in names})


def call(client: ContractClient, contract: Contract, input: Mapping[str, Any] | None = None, **kwargs: Any) -> Result:
    """Generic entry point: call(client, find_user, {"id": 1})."""
    return client.call(contract, input, **kwargs)


def call_or_raise(client: ContractClient, contract: Contract, input: Mapping[str, Any] | None = None, **kwargs: Any) -> Any:
    return client.call_or_raise(contract, input, **kwargs)
