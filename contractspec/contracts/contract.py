"""
contractspec.contracts.contract

Purpose:
    Immutable description of one endpoint: route (method + path), input schemas
    (params / query / body), output schema and an optional inline handler.

Notes:
    - Every builder step validates its own argument against a fixed pydantic
      meta-schema and raises ContractError immediately (fail-fast at build time).
    - Builder steps return a new Contract via dataclasses.replace; a Contract is
      never mutated, so one instance can serve any number of concurrent requests.
    - Path segments prefixed with ":" (e.g. /users/:id) bind to params fields.

Usage:
    find_user = (
        Contract.new()
        .with_route("get", "/users/:id")
        .with_input(params=UserId)
        .with_output(User)
    )

Author:
    Kanir Pandya

Created:
    2026-03-02
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, PydanticUserError, field_validator
from pydantic import ValidationError as PydanticValidationError

from contractspec.errors import ContractError
from contractspec.schema import adapter_for, clean_errors, is_object_schema, schema_kind

PATH_PARAM_PREFIX = ":"

INPUT_SOURCES: tuple[str, ...] = ("params", "query", "body")


class HttpMethod(str, Enum):
    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"


# ---------------------------------------------------------------------------
# Meta-schemas (what a contract declaration itself must look like)
# ---------------------------------------------------------------------------

class _RouteSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    method: HttpMethod
    path: str

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, HttpMethod):
            return v.strip().lower()
        return v

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v:
            raise ValueError("Path must be a non-empty string.")
        if not v.startswith("/"):
            raise ValueError(f"Path must start with '/': {v!r}.")
        return v


class _InputSpec(BaseModel):
    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    params: Optional[Any] = None
    query: Optional[Any] = None
    body: Optional[Any] = None

    @field_validator("params", "query", "body")
    @classmethod
    def validate_object_schema(cls, v: Any) -> Any:
        if v is None:
            return v
        if not is_object_schema(v):
            raise ValueError(
                f"Type mismatch: expected an object-shaped schema, got {schema_kind(v).value} ({v!r})."
            )
        return v


def _format_meta_errors(what: str, exc: PydanticValidationError) -> str:
    parts = []
    for err in clean_errors(exc.errors(include_url=False)):
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return f"Invalid {what}: " + "; ".join(parts)


def _check_handler_arity(fn: Any) -> None:
    if not callable(fn):
        raise ContractError(f"Invalid handler: expected a callable, got {type(fn).__name__}.")

    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError) as exc:
        raise ContractError(f"Invalid handler: cannot inspect signature of {fn!r}.") from exc

    positional = [
        p
        for p in sig.parameters.values()
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    required_kw_only = [
        p
        for p in sig.parameters.values()
        if p.kind == inspect.Parameter.KEYWORD_ONLY and p.default is inspect.Parameter.empty
    ]
    has_var_positional = any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in sig.parameters.values())

    if required_kw_only:
        raise ContractError("Invalid handler: required keyword-only parameters are not supported.")

    if len(positional) == 2:
        return
    if has_var_positional and len(positional) <= 2:
        return

    raise ContractError(
        f"Invalid handler: expected a function of arity 2 (input, context), got {len(positional)}."
    )


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Route:
    method: HttpMethod = HttpMethod.GET
    path: str = "/"

    def __post_init__(self) -> None:
        try:
            spec = _RouteSpec(method=self.method, path=self.path)
        except PydanticValidationError as exc:
            raise ContractError(_format_meta_errors("route", exc)) from exc
        object.__setattr__(self, "method", spec.method)

    @property
    def path_params(self) -> tuple[str, ...]:
        return tuple(
            segment[len(PATH_PARAM_PREFIX) :]
            for segment in self.path.split("/")
            if segment.startswith(PATH_PARAM_PREFIX) and len(segment) > len(PATH_PARAM_PREFIX)
        )


@dataclass(frozen=True)
class ContractInput:
    params: Any = None
    query: Any = None
    body: Any = None

    def __post_init__(self) -> None:
        try:
            _InputSpec(params=self.params, query=self.query, body=self.body)
        except PydanticValidationError as exc:
            raise ContractError(_format_meta_errors("input", exc)) from exc

    def get(self, source: str) -> Any:
        if source not in INPUT_SOURCES:
            raise KeyError(source)
        return getattr(self, source)

    def declared(self) -> tuple[str, ...]:
        return tuple(s for s in INPUT_SOURCES if getattr(self, s) is not None)


Handler = Callable[[Any, Any], Any]


@dataclass(frozen=True)
class Contract:
    route: Route = field(default_factory=Route)
    input: ContractInput = field(default_factory=ContractInput)
    output: Any = None
    handler: Optional[Handler] = None

    def __post_init__(self) -> None:
        if not isinstance(self.route, Route):
            raise ContractError(f"Invalid route: expected Route, got {type(self.route).__name__}.")
        if self.input is None:
            object.__setattr__(self, "input", ContractInput())
        elif not isinstance(self.input, ContractInput):
            raise ContractError(f"Invalid input: expected ContractInput, got {type(self.input).__name__}.")
        if self.output is not None:
            _check_output_schema(self.output)
        if self.handler is not None:
            _check_handler_arity(self.handler)

    # ---- builder steps ----

    @classmethod
    def new(cls) -> "Contract":
        return cls()

    def with_route(self, method: HttpMethod | str, path: str) -> "Contract":
        return replace(self, route=Route(method=method, path=path))

    def with_input(self, *, params: Any = None, query: Any = None, body: Any = None) -> "Contract":
        return replace(self, input=ContractInput(params=params, query=query, body=body))

    def with_output(self, schema: Any) -> "Contract":
        if schema is not None:
            _check_output_schema(schema)
        return replace(self, output=schema)

    def with_handler(self, fn: Handler) -> "Contract":
        _check_handler_arity(fn)
        return replace(self, handler=fn)

    # ---- accessors ----

    @property
    def method(self) -> HttpMethod:
        return self.route.method

    @property
    def path(self) -> str:
        return self.route.path

    @property
    def path_params(self) -> tuple[str, ...]:
        return self.route.path_params


def _check_output_schema(schema: Any) -> None:
    try:
        adapter_for(schema)
    except (PydanticUserError, TypeError) as exc:
        raise ContractError(f"Invalid output schema {schema!r}: {exc}") from exc


def new() -> Contract:
    """Module-level alias for Contract.new()."""
    return Contract.new()
