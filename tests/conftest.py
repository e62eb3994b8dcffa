"""
tests.conftest

Shared pytest fixtures: demo app clients and a few tiny schemas.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from contractspec.demo.app import UserStore, create_app
from contractspec.demo.users_api import User
from contractspec.settings import Settings


@pytest.fixture()
def seeded_store() -> UserStore:
    return UserStore([User(id=1, name="Alice", email="alice@example.com"), User(id=2, name="Bob")])


@pytest.fixture()
def client_factory(seeded_store):
    """
    Factory fixture that creates a fresh TestClient over the demo app.

    IMPORTANT:
        Pass raise_server_exceptions=False when a test expects the global 500
        handler to answer instead of the exception reaching the test.
    """

    def _make(settings: Settings | None = None, *, raise_server_exceptions: bool = True) -> TestClient:
        app = create_app(settings or Settings(), store=seeded_store)
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    return _make


@pytest.fixture()
def client(client_factory) -> TestClient:
    return client_factory()
