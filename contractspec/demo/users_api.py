"""
contractspec.demo.users_api

Purpose:
    Shared contract definitions for the demo Users API.
    Schema-only (no handlers): the same registry is imported by the demo server
    (which attaches handlers) and by clients (which bind call functions).

Author:
    Kanir Pandya

Created:
    2026-03-06
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from contractspec.contracts.contract import Contract, HttpMethod
from contractspec.contracts.registry import ContractRegistry


class User(BaseModel):
    id: int
    name: str
    email: Optional[str] = None


class UserId(BaseModel):
    id: int


class Pagination(BaseModel):
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)


class NewUser(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    email: Optional[str] = None


class UpdateOptions(BaseModel):
    notify: bool = False


list_users = (
    Contract.new()
    .with_route(HttpMethod.GET, "/users")
    .with_input(query=Pagination)
    .with_output(list[User])
)

find_user = (
    Contract.new()
    .with_route(HttpMethod.GET, "/users/:id")
    .with_input(params=UserId)
    .with_output(User)
)

create_user = (
    Contract.new()
    .with_route(HttpMethod.POST, "/users")
    .with_input(body=NewUser)
    .with_output(User)
)

update_user = (
    Contract.new()
    .with_route(HttpMethod.PUT, "/users/:id")
    .with_input(params=UserId, query=UpdateOptions, body=NewUser)
    .with_output(User)
)

delete_user = (
    Contract.new()
    .with_route(HttpMethod.DELETE, "/users/:id")
    .with_input(params=UserId)
)

users_api = ContractRegistry(
    {
        "list_users": list_users,
        "find_user": find_user,
        "create_user": create_user,
        "update_user": update_user,
        "delete_user": delete_user,
    }
)
