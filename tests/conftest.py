"""
tests/conftest.py -- Shared test fixtures for Todoboard integration tests.

This module provides:
  - _patch_lifespan(): wires a test store and a mocked auth client into
    app.state, bypassing real startup
  - client: TestClient over the assembled app (API + web), follow_redirects=False
  - make_token(): mint provider-style access tokens signed with the test secret
  - make_session(): build an AuthSession for mocked provider responses

Design: every test gets a fresh TodoStore(delay=0) so id counters and
deletions never leak between tests. The auth client is a MagicMock with
spec=AuthProviderClient -- tests set return values or side effects on it
and assert on the calls.

The DEBUG env var must be set before any auth/core import so get_settings()
auto-generates AUTH_JWT_SECRET in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

# CRITICAL: Set DEBUG before any auth/core import so get_settings() can
# auto-generate AUTH_JWT_SECRET in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from api.limiter import limiter
from asgi import app
from auth.models import AuthSession, AuthUser
from auth.provider import AuthProviderClient
from core.config import get_settings
from todos.store import TodoStore

# TrustedHostMiddleware only admits localhost-style hosts.
BASE_URL = "http://localhost"

# ---------------------------------------------------------------------------
# Token helpers
# ---------------------------------------------------------------------------


def make_token(
    sub: str = "user-123",
    email: str = "ada@example.com",
    expires_in: int = 3600,
    audience: str | None = None,
    secret: str | None = None,
) -> str:
    """Encode an HS256 access token shaped like the provider's."""
    settings = get_settings()
    payload = {
        "sub": sub,
        "email": email,
        "aud": audience or settings.auth_jwt_audience,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, secret or settings.auth_jwt_secret, algorithm="HS256")


def make_session(sub: str = "user-123", email: str = "ada@example.com") -> AuthSession:
    return AuthSession(
        access_token=make_token(sub=sub, email=email),
        refresh_token="refresh-abc",
        expires_in=3600,
        user=AuthUser(id=sub, email=email),
    )


# ---------------------------------------------------------------------------
# Lifespan patch
# ---------------------------------------------------------------------------


def _patch_lifespan(todo_store: TodoStore, auth_client: MagicMock):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.todo_store = todo_store
        app.state.auth_client = auth_client
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def todo_store() -> TodoStore:
    return TodoStore(delay=0)


@pytest.fixture
def auth_client() -> MagicMock:
    return MagicMock(spec=AuthProviderClient)


@pytest.fixture
def client(todo_store: TodoStore, auth_client: MagicMock) -> Generator[TestClient, None, None]:
    """Yield a TestClient over the assembled app.

    follow_redirects=False is essential: tests assert on redirect locations
    and HX-Redirect headers, which are invisible once the client follows them.
    The rate limiter is reset so sign-in tests never trip the per-IP limit.
    """
    limiter.reset()
    app.router.lifespan_context = _patch_lifespan(todo_store, auth_client)
    with TestClient(app, base_url=BASE_URL, follow_redirects=False, raise_server_exceptions=True) as c:
        yield c
