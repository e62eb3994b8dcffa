"""
contractspec.server.routing

Purpose:
    Mount contracts that carry an inline handler onto a FastAPI APIRouter.
    FastAPI still owns routing/middleware; this only translates the contract's
    route into an add_api_route() call whose endpoint runs dispatcher.handle().

Author:
    Kanir Pandya

Created:
    2026-03-05
"""

from __future__ import annotations

import logging
from typing import Mapping

from fastapi import APIRouter
from starlette.requests import Request
from starlette.responses import Response

from contractspec.contracts.contract import PATH_PARAM_PREFIX, Contract
from contractspec.server.dispatcher import handle

logger = logging.getLogger(__name__)


def to_route_path(path: str) -> str:
    """Translate "/users/:id" into FastAPI's "/users/{id}"."""
    segments = []
    for segment in path.split("/"):
        if segment.startswith(PATH_PARAM_PREFIX) and len(segment) > len(PATH_PARAM_PREFIX):
            segments.append("{" + segment[len(PATH_PARAM_PREFIX) :] + "}")
        else:
            segments.append(segment)
    return "/".join(segments)


def _make_endpoint(contract: Contract):
    async def endpoint(request: Request) -> Response:
        return await handle(request, contract)

    return endpoint


def include_contracts(
    router: APIRouter,
    contracts: Mapping[str, Contract],
    *,
    tags: list[str] | None = None,
) -> list[str]:
    """
    Register every contract with a handler on *router*.

    Returns the operation names that were mounted. Handler-less contracts are
    skipped (they describe endpoints served elsewhere).
    """
    mounted: list[str] = []
    for name, contract in contracts.items():
        if contract.handler is None:
            logger.debug("Skipping contract without handler: %s", name)
            continue

        router.add_api_route(
            to_route_path(contract.path),
            _make_endpoint(contract),
            methods=[contract.method.value.upper()],
            name=name,
            tags=list(tags) if tags else None,
            include_in_schema=False,
        )
        mounted.append(name)

    logger.info("Mounted %d contract route(s): %s", len(mounted), ", ".join(mounted))
    return mounted
