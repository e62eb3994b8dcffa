"""
contractspec.demo.app

Purpose:
    FastAPI application entrypoint for the demo Users API.
    Attaches handlers to the shared users_api contracts and mounts them under
    the configured API prefix, alongside the usual request-id middleware,
    global error handlers and health endpoint.

Notes:
    - The user store is in-memory and lives on app.state; handlers reach it
      through the request passed as their second argument.

Author:
    Kanir Pandya

Created:
    2026-03-06
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from fastapi import APIRouter, FastAPI
from starlette.requests import Request

from contractspec.contracts.registry import ContractRegistry
from contractspec.demo.health import router as health_router
from contractspec.demo.users_api import User, users_api
from contractspec.errors import HandlerError
from contractspec.logging.logging_config import configure_logging
from contractspec.middleware.request_id import RequestIdMiddleware, RequestIdPolicy
from contractspec.result import Err, Ok
from contractspec.server import responses
from contractspec.server.error_handlers import register_error_handlers
from contractspec.server.routing import include_contracts
from contractspec.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class UserStore:
    def __init__(self, users: list[User] | None = None) -> None:
        self._lock = threading.Lock()
        self._users: dict[int, User] = {u.id: u for u in (users or [])}
        self._next_id = max(self._users, default=0) + 1

    def page(self, page: int, page_size: int) -> list[User]:
        with self._lock:
            ordered = [self._users[k] for k in sorted(self._users)]
        start = (page - 1) * page_size
        return ordered[start : start + page_size]

    def get(self, user_id: int) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def create(self, name: str, email: str | None) -> User:
        with self._lock:
            user = User(id=self._next_id, name=name, email=email)
            self._users[user.id] = user
            self._next_id += 1
        return user

    def update(self, user_id: int, name: str, email: str | None) -> User | None:
        with self._lock:
            if user_id not in self._users:
                return None
            user = User(id=user_id, name=name, email=email)
            self._users[user_id] = user
        return user

    def delete(self, user_id: int) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None


def _store(request: Request) -> UserStore:
    return request.app.state.user_store


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def list_users(input: dict[str, Any], request: Request):
    return Ok(_store(request).page(input["page"], input["page_size"]))


def find_user(input: dict[str, Any], request: Request):
    user = _store(request).get(input["id"])
    if user is None:
        return Err(HandlerError.NOT_FOUND)
    return Ok(user)


def create_user(input: dict[str, Any], request: Request):
    user = _store(request).create(input["name"], input.get("email"))
    logger.info("created user id=%s", user.id)
    return responses.created(user)


def update_user(input: dict[str, Any], request: Request):
    user = _store(request).update(input["id"], input["name"], input.get("email"))
    if user is None:
        return Err(HandlerError.NOT_FOUND)
    if input["notify"]:
        logger.info("notify: user id=%s updated", user.id)
    return Ok(user)


def delete_user(input: dict[str, Any], request: Request):
    if not _store(request).delete(input["id"]):
        return Err(HandlerError.NOT_FOUND)
    return responses.no_content()


HANDLERS = {
    "list_users": list_users,
    "find_user": find_user,
    "create_user": create_user,
    "update_user": update_user,
    "delete_user": delete_user,
}


def served_contracts() -> ContractRegistry:
    return ContractRegistry({name: users_api[name].with_handler(fn) for name, fn in HANDLERS.items()})


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(settings: Settings | None = None, store: UserStore | None = None) -> FastAPI:
    settings = settings or get_settings()

    configure_logging(settings.log_level)

    app = FastAPI(title=settings.service_name, version=settings.service_version)
    app.state.user_store = store or UserStore()

    @app.get("/")
    def root():
        return {"status": "ok", "service": settings.service_name}

    app.add_middleware(RequestIdMiddleware, policy=RequestIdPolicy())

    register_error_handlers(app)

    app.include_router(health_router)

    api_router = APIRouter(prefix=settings.api_prefix)
    include_contracts(api_router, served_contracts(), tags=["users"])
    app.include_router(api_router)

    return app


app = create_app()
