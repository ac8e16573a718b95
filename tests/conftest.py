"""
tests/conftest.py -- Shared test fixtures for College Tours integration tests.

This module provides:
  - make_settings(): Settings for an isolated in-memory app (debug, fixed
    secret, one admin email, rate limiting off)
  - api_client: module-scoped TestClient over create_app(make_settings(...))
  - new_user: factory that registers and logs in a fresh account
  - auth_headers / admin_user: one-line shortcuts over new_user
  - settings_factory: make_settings() for modules that build their own app

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.
Each test module gets its own name, so modules never see each other's data.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from core.config import Settings

TEST_SECRET = "test-secret-key-for-college-tours-0123456789"
ADMIN_EMAIL = "dean@uni.edu"

_user_seq = itertools.count(1)


def make_settings(db_suffix: str, **overrides) -> Settings:
    """Return Settings bound to a private shared-memory database.

    Args:
        db_suffix: Unique string appended to the DB name so test modules don't
                   share state.
        overrides: Any Settings field, e.g. auth_dev_bypass=True.
    """
    values = {
        "debug": True,
        "secret_key": TEST_SECRET,
        "database_url": f"sqlite:///file:test_tours_{db_suffix}?mode=memory&cache=shared&uri=true",
        "admin_emails": [ADMIN_EMAIL],
        "allowed_hosts": ["testserver"],
        "rate_limit_enabled": False,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture(scope="module")
def api_client(request: pytest.FixtureRequest) -> Generator[TestClient, None, None]:
    """Yield a TestClient over a freshly built app with its own database.

    The client is entered as a context manager so the lifespan runs and the
    stores exist on app.state for the duration of the module.
    """
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    app = create_app(make_settings(suffix))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def new_user(api_client: TestClient) -> Callable[..., dict]:
    """Return a factory that registers a unique user and logs it in.

    The returned dict has username, email, password, id, token and a ready
    Authorization header under "headers".
    """

    def _make(prefix: str = "user", email: str | None = None) -> dict:
        n = next(_user_seq)
        username = f"{prefix}{n}"
        email = email or f"{username}@uni.edu"
        password = f"pw-{username}"
        resp = api_client.post("/api/auth/register", json={"username": username, "email": email, "password": password})
        assert resp.status_code == 200, f"register failed: {resp.status_code} {resp.text}"
        login = api_client.post("/api/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, f"login failed: {login.status_code} {login.text}"
        data = login.json()
        return {
            "username": username,
            "email": email,
            "password": password,
            "id": data["user"]["id"],
            "token": data["token"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
        }

    return _make


@pytest.fixture
def auth_headers(new_user: Callable[..., dict]) -> dict:
    """Authorization header for a freshly registered, non-admin user."""
    return new_user()["headers"]


@pytest.fixture
def admin_user(new_user: Callable[..., dict]) -> dict:
    """Register the allow-listed admin account. Use at most once per module."""
    return new_user("dean", email=ADMIN_EMAIL)


@pytest.fixture(scope="session")
def settings_factory() -> Callable[..., Settings]:
    """Expose make_settings() to modules that build their own app."""
    return make_settings
