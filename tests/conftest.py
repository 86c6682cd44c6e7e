"""
tests/conftest.py -- Shared test fixtures for MedAI integration tests.

This module provides:
  - _make_test_stores(): creates isolated in-memory DBs for users + analyses
  - _patch_lifespan(): wires test stores and a chosen session strategy into
    app.state, bypassing real startup
  - token_client: TestClient against a token-mode app (https base URL so the
    Secure cookie round-trips)
  - cookie_client: TestClient against a cookie-mode app

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.
Each fixture call gets a fresh uuid-suffixed name, so tests never share rows
or cookies.

LOGIN_RATE_LIMIT is raised before get_settings() is first called (api.main
caches it on import): the suite logs in far more than ten times a minute
from the same "testclient" address. Rate-limit tests patch the limit back
down for their own requests.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

os.environ.setdefault("LOGIN_RATE_LIMIT", "10000/minute")

import pytest
from fastapi.testclient import TestClient

from analysis.store import AnalysisStore
from api.main import app
from auth.sessions import CookieSession, SessionManager, SessionStrategy, TokenSession
from auth.store import UserStore

TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores() -> tuple[UserStore, AnalysisStore]:
    suffix = uuid.uuid4().hex
    users_url = f"sqlite:///file:test_users_{suffix}?mode=memory&cache=shared&uri=true"
    analyses_url = f"sqlite:///file:test_analyses_{suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=users_url), AnalysisStore(db_url=analyses_url)


def _patch_lifespan(user_store: UserStore, analysis_store: AnalysisStore, strategy: SessionStrategy):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.analysis_store = analysis_store
        app.state.session_manager = SessionManager(user_store, strategy)
        yield

    return test_lifespan


@pytest.fixture
def token_client() -> Generator[tuple[TestClient, UserStore, AnalysisStore], None, None]:
    """Yield (client, user_store, analysis_store) for a token-mode server."""
    user_store, analysis_store = _make_test_stores()
    app.router.lifespan_context = _patch_lifespan(user_store, analysis_store, TokenSession(TEST_SECRET))

    with TestClient(app, base_url="https://testserver", raise_server_exceptions=True) as client:
        yield client, user_store, analysis_store

    user_store.close()
    analysis_store.close()


@pytest.fixture
def cookie_client() -> Generator[tuple[TestClient, UserStore, AnalysisStore], None, None]:
    """Yield (client, user_store, analysis_store) for a cookie-mode server."""
    user_store, analysis_store = _make_test_stores()
    app.router.lifespan_context = _patch_lifespan(user_store, analysis_store, CookieSession())

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, user_store, analysis_store

    user_store.close()
    analysis_store.close()
