"""
tests/conftest.py -- Shared test fixtures for bootcamp-auth.

This module provides:
  - fast_bcrypt: autouse fixture that drops bcrypt to 4 rounds for speed
  - FakeClock: controllable clock for TokenService expiry tests
  - store / token_service / auth_service: isolated unit-level collaborators
  - api_client: TestClient with a patched lifespan for HTTP integration tests

Design: the API fixture uses a named shared-memory SQLite URI (not plain
:memory:) because TestClient runs sync route handlers in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread. The named URI format shares one in-memory instance across all
connections in the same process.

The DEBUG env var must be set before any api/core import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from functools import partial

# CRITICAL: Set DEBUG before any api/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import bcrypt
import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenService

TEST_SECRET = "test-secret-key-with-at-least-32-characters!"

_real_gensalt = bcrypt.gensalt


class FakeClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch: pytest.MonkeyPatch) -> None:
    """Cut bcrypt work factor to the minimum so hashing does not dominate runtime."""
    monkeypatch.setattr(bcrypt, "gensalt", partial(_real_gensalt, rounds=4))


@pytest.fixture
def test_secret() -> str:
    return TEST_SECRET


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_service(clock: FakeClock) -> TokenService:
    return TokenService(TEST_SECRET, expire_seconds=3600, issuer="bootcamp", clock=clock)


@pytest.fixture
def auth_service(store: UserStore, token_service: TokenService) -> AuthService:
    return AuthService(store, token_service)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(user_store: UserStore, token_service: TokenService):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test collaborators into app.state so TestClient routes
    see an isolated test DB and a known signing secret.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.token_service = token_service
        app.state.auth_service = AuthService(user_store, token_service)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, TokenService], None, None]:
    """Yield (client, token_service) for API integration tests.

    The token service uses the real wall clock so tokens issued through the
    API are valid for the whole test module.
    """
    user_store = UserStore(f"sqlite:///file:test_auth_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true")
    token_service = TokenService(TEST_SECRET)

    app.router.lifespan_context = _patch_lifespan(user_store, token_service)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token_service

    user_store.close()
