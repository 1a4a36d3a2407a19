"""
tests/conftest.py -- Shared test fixtures for the appliance tracker.

This module provides:
  - _make_test_components(): isolated in-memory DB + stores + token issuer
  - _patch_lifespan(): wires test components into app.state, bypassing real startup
  - api_client: module-scoped TestClient with an admin JWT, re-wired per test
  - fresh_client: function-scoped TestClient on an empty database (id 1 is free)
  - engine / user_store / appliance_store: plain in-memory stores for unit tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the TestClient fixtures because route handlers run in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.
SingletonThreadPool is passed explicitly: one connection per worker thread,
and the database lives as long as any of them stays open.

DEBUG must be set before any core import so get_settings() auto-generates
SECRET_KEY instead of raising ValueError. BCRYPT_ROUNDS is lowered so the
registration tests do not spend most of their time hashing.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set before any core/auth/api import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.pool import SingletonThreadPool

from api.main import app
from auth.models import Claims, User
from auth.store import UserStore
from auth.tokens import TokenIssuer, hash_password
from core.database import create_db_engine
from inventory.store import ApplianceStore

TEST_SECRET = "test-secret-key-for-the-appliance-tracker-suite"


# ---------------------------------------------------------------------------
# Component helpers
# ---------------------------------------------------------------------------


def _make_test_components(db_name: str) -> tuple[Engine, UserStore, ApplianceStore, TokenIssuer]:
    """Create an isolated named shared-memory database and the components on top of it.

    Args:
        db_name: Unique database name so test modules don't share state.
    """
    engine = create_db_engine(
        f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true",
        poolclass=SingletonThreadPool,
    )
    return engine, UserStore(engine), ApplianceStore(engine), TokenIssuer(TEST_SECRET, expire_seconds=3600)


def _patch_lifespan(engine: Engine, user_store: UserStore, appliances: ApplianceStore, tokens: TokenIssuer):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test components into app.state so TestClient routes see
    isolated test DBs rather than the configured database file.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.engine = engine
        app.state.user_store = user_store
        app.state.appliances = appliances
        app.state.tokens = tokens
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def _api_session() -> Generator[tuple[TestClient, str, int, tuple], None, None]:
    """Module-wide client, admin token and the components behind them."""
    components = _make_test_components(f"test_api_{uuid.uuid4().hex}")
    engine, user_store, _appliances, tokens = components

    uid = user_store.create_user(
        User(username="testadmin", hashed_password=hash_password("testpass123", rounds=4), role="admin")
    )
    token = tokens.issue(Claims(id=uid, username="testadmin", role="admin"))

    app.router.lifespan_context = _patch_lifespan(*components)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, uid, components

    engine.dispose()


@pytest.fixture
def api_client(_api_session) -> tuple[TestClient, str, int]:
    """Return (client, token, user_id) for API integration tests.

    The admin user (testadmin / testpass123) is created before the client
    starts and a JWT is issued for use in Authorization headers.

    app is a single global, so a fresh_client test that ran in between may
    have left its own (now disposed) components or a mock on app.state. The
    module's components are put back before every test.
    """
    client, token, uid, (engine, user_store, appliances, tokens) = _api_session
    app.state.engine = engine
    app.state.user_store = user_store
    app.state.appliances = appliances
    app.state.tokens = tokens
    return client, token, uid


@pytest.fixture
def fresh_client() -> Generator[TestClient, None, None]:
    """Yield a TestClient over an empty database.

    Function-scoped so scenario tests can rely on the first appliance getting
    id 1 and on no user existing yet.
    """
    engine, user_store, appliances, tokens = _make_test_components(f"test_fresh_{uuid.uuid4().hex}")
    app.router.lifespan_context = _patch_lifespan(engine, user_store, appliances, tokens)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    engine.dispose()


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Plain :memory: engine. Store unit tests run on one thread, so no shared cache is needed."""
    eng = create_db_engine("sqlite:///:memory:")
    yield eng
    eng.dispose()


@pytest.fixture
def user_store(engine: Engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def appliance_store(engine: Engine) -> ApplianceStore:
    return ApplianceStore(engine)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, expire_seconds=3600)
