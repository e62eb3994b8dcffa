"""
contractspec.schema

Purpose:
    Thin facade over pydantic used as the schema engine for contracts.
    A "schema" is anything pydantic can validate: a BaseModel subclass, a
    TypedDict, list[Model], dict[str, int], a scalar type, Annotated[...], etc.

Notes:
    - coerce=True runs pydantic in lax mode ("123" -> 123, "true" -> True),
      unless the schema itself opts into strict mode.
    - coerce=False serializes the value to JSON and validates it in strict
      JSON mode: "123" is rejected for an int field, while the wire forms of
      enums, UUIDs and datetimes ("admin", "2026-03-02T00:00:00") are accepted.
    - Errors are cleaned for clients (see clean_errors) and can be folded into a
      nested tree keyed by field path (see treefy_errors).
    - TypeAdapters are memoised per schema object; they are immutable.

Author:
    Kanir Pandya

Created:
    2026-03-02
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Mapping
from enum import Enum
from functools import lru_cache
from typing import Any, get_origin

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError, to_json
from typing_extensions import is_typeddict

from contractspec.result import Err, Ok, Result

ROOT_ERRORS_KEY = "_errors"


class SchemaKind(str, Enum):
    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"


_ARRAY_ORIGINS = (list, tuple, set, frozenset)


def schema_kind(schema: Any) -> SchemaKind:
    """Classify a schema into the closed set of shapes contracts care about."""
    origin = get_origin(schema)
    if origin is not None:
        if isinstance(origin, type):
            if issubclass(origin, Mapping) or origin is dict:
                return SchemaKind.OBJECT
            if issubclass(origin, _ARRAY_ORIGINS):
                return SchemaKind.ARRAY
        return SchemaKind.SCALAR

    if isinstance(schema, type):
        if issubclass(schema, BaseModel) or is_typeddict(schema) or dataclasses.is_dataclass(schema):
            return SchemaKind.OBJECT
        if issubclass(schema, Mapping) or schema is dict:
            return SchemaKind.OBJECT
        if issubclass(schema, _ARRAY_ORIGINS):
            return SchemaKind.ARRAY

    return SchemaKind.SCALAR


def is_object_schema(schema: Any) -> bool:
    return schema_kind(schema) == SchemaKind.OBJECT


@lru_cache(maxsize=None)
def _cached_adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def adapter_for(schema: Any) -> TypeAdapter:
    """Return a (memoised where possible) TypeAdapter for *schema*."""
    try:
        return _cached_adapter(schema)
    except TypeError:
        # unhashable schema objects (e.g. Annotated with list metadata)
        return TypeAdapter(schema)


def validate(schema: Any, value: Any, *, coerce: bool) -> Result:
    """
    Validate *value* against *schema*.

    Returns Ok(validated_value) or Err(list_of_clean_errors). Never raises for
    invalid data; a schema pydantic cannot build raises at adapter creation.
    """
    adapter = adapter_for(schema)
    try:
        if coerce:
            # strict=None defers to the schema's own config (model_config / Field(strict=...))
            return Ok(adapter.validate_python(value, strict=None))
        return Ok(adapter.validate_json(to_json(value), strict=True))
    except PydanticValidationError as exc:
        return Err(clean_errors(exc.errors(include_url=False)))
    except PydanticSerializationError as exc:
        return Err([{"type": "serialization", "loc": (), "msg": f"Value is not JSON serializable: {exc}"}])


def to_mapping(value: Any) -> dict[str, Any]:
    """
    Shallow conversion of a validated object value into a plain dict.

    Nested models stay model instances; only the top level is flattened.
    """
    if value is None:
        return {}
    if isinstance(value, BaseModel):
        return dict(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"Expected an object-shaped value, got {type(value).__name__}")


def dump_json_compatible(schema: Any, value: Any) -> Any:
    """Serialize a validated value into JSON-compatible Python data."""
    return adapter_for(schema).dump_python(value, mode="json")


# ---------------------------------------------------------------------------
# Error cleaning / tree building
# ---------------------------------------------------------------------------

def clean_errors(errors: Any) -> list[dict[str, Any]]:
    """
    Clean pydantic validation errors for stable client-facing payloads.

    - Strip "Value error, " prefix
    - Rewrite enum messages into "Invalid <field>. Allowed values: a, b."
    - Rewrite missing required into "Missing required field: <field>."
    - Rewrite extra forbidden into "Unknown field: <field>."
    - Drop ctx/url entirely for minimal/stable payloads
    """
    cleaned: list[dict[str, Any]] = []
    if not isinstance(errors, list):
        return cleaned

    for raw in errors:
        if not isinstance(raw, dict):
            continue
        err = dict(raw)

        err_type = err.get("type")
        loc = tuple(err.get("loc") or ())
        msg = err.get("msg")

        if isinstance(msg, str):
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, ") :]
            elif msg.startswith("Value error,"):
                msg = msg[len("Value error,") :].lstrip()
            err["msg"] = msg

        field_name = loc[-1] if loc else None

        if err_type == "enum" and isinstance(err.get("msg"), str) and field_name is not None:
            options = re.findall(r"'([^']+)'", err["msg"])
            if options:
                err["msg"] = f"Invalid {field_name}. Allowed values: {', '.join(options)}."

        if err_type == "missing" and field_name is not None:
            err["msg"] = f"Missing required field: {field_name}."

        if err_type == "extra_forbidden" and field_name is not None:
            err["msg"] = f"Unknown field: {field_name}."

        err["loc"] = loc
        err.pop("ctx", None)
        err.pop("url", None)
        cleaned.append(err)

    return cleaned


def treefy_errors(errors: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Fold a flat error list into a nested tree keyed by field path.

        [{"loc": ("user", "id"), "msg": "..."}]  ->  {"user": {"id": ["..."]}}

    Messages on a node that also has children go under "_errors".
    """
    tree: dict[str, Any] = {}
    for err in errors:
        path = [str(part) for part in err.get("loc") or ()]
        msg = err.get("msg", "Invalid value")

        if not path:
            tree.setdefault(ROOT_ERRORS_KEY, []).append(msg)
            continue

        node = tree
        for part in path[:-1]:
            child = node.get(part)
            if child is None:
                child = {}
                node[part] = child
            elif isinstance(child, list):
                child = {ROOT_ERRORS_KEY: child}
                node[part] = child
            node = child

        leaf = path[-1]
        existing = node.get(leaf)
        if isinstance(existing, dict):
            existing.setdefault(ROOT_ERRORS_KEY, []).append(msg)
        elif isinstance(existing, list):
            existing.append(msg)
        else:
            node[leaf] = [msg]

    return tree
