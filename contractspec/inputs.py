"""
contractspec.inputs

Purpose:
    Validate the three request input sources (path params, query string, body)
    against a contract's input schemas and merge them into one flat input.

Notes:
    - Sources are validated in params -> query -> body order with coercion on.
    - The first failing source short-circuits; later sources are not validated.
    - A source without a schema contributes {}.
    - A raw source may already be Err(errors) (e.g. an undecodable JSON body);
      it fails in its own turn, after the sources before it have passed.
    - Merge precedence is params -> query -> body: on a key collision the later
      source wins, so a body field always beats a query field of the same name.

Author:
    Kanir Pandya

Created:
    2026-03-03
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from contractspec.contracts.contract import INPUT_SOURCES, ContractInput
from contractspec.result import Err, Ok, Result
from contractspec.schema import to_mapping, validate


@dataclass(frozen=True)
class ValidatedSources:
    params: dict[str, Any] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)

    def merged(self) -> dict[str, Any]:
        return merge_sources(self)


def validate_source(schema: Any, raw: Any) -> Result:
    """Validate one source; no schema means the source contributes nothing."""
    if schema is None:
        return Ok({})
    if isinstance(raw, Err):
        return raw

    result = validate(schema, {} if raw is None else raw, coerce=True)
    if isinstance(result, Err):
        return result
    return Ok(to_mapping(result.value))


def validate_sources(
    contract_input: ContractInput | None,
    *,
    params: Mapping[str, Any] | None = None,
    query: Mapping[str, Any] | None = None,
    body: Any = None,
) -> Result:
    """
    Validate every declared source, failing fast on the first bad one.

    Returns Ok(ValidatedSources) or Err(errors) where errors is the cleaned
    pydantic error list of the failing source.
    """
    contract_input = contract_input or ContractInput()
    raw_by_source = {"params": params, "query": query, "body": body}

    validated: dict[str, dict[str, Any]] = {}
    for source in INPUT_SOURCES:
        result = validate_source(contract_input.get(source), raw_by_source[source])
        if isinstance(result, Err):
            return result
        validated[source] = result.value

    return Ok(ValidatedSources(**validated))


def merge_sources(sources: ValidatedSources) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for source in INPUT_SOURCES:
        merged.update(getattr(sources, source))
    return merged


def validate_input(
    contract_input: ContractInput | None,
    *,
    params: Mapping[str, Any] | None = None,
    query: Mapping[str, Any] | None = None,
    body: Any = None,
) -> Result:
    """Server path: validate every source, then flatten into one input dict."""
    result = validate_sources(contract_input, params=params, query=query, body=body)
    if isinstance(result, Err):
        return result
    return Ok(merge_sources(result.value))
