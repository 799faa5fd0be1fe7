"""
tests/conftest.py -- Shared test fixtures for Postboard.

This module provides:
  - settings: a Settings instance with a fixed signing key
  - user_store / post_store: fresh in-memory stores per test
  - auth_service / post_service: services wired to those stores
  - api_client: TestClient over create_app() with injected shared-memory stores

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
api_client because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

The DEBUG env var must be set before any app import so get_settings() does
not refuse to build without a SECRET_KEY.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator

# Set DEBUG before any core/auth import so get_settings() can auto-generate
# SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from auth.service import AuthService
from auth.store import UserStore
from core.config import Settings
from posts.service import PostService
from posts.store import PostStore

TEST_SECRET_KEY = "test-secret-key-for-postboard-0123456789abcdef"


def _shared_memory_url(name: str) -> str:
    return f"sqlite:///file:{name}?mode=memory&cache=shared&uri=true"


@pytest.fixture
def settings() -> Settings:
    return Settings(debug=True, secret_key=TEST_SECRET_KEY, token_expire_seconds=600)


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def post_store() -> Generator[PostStore, None, None]:
    store = PostStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def auth_service(user_store: UserStore, settings: Settings) -> AuthService:
    return AuthService(user_store, settings)


@pytest.fixture
def post_service(post_store: PostStore) -> PostService:
    return PostService(post_store)


@pytest.fixture
def api_client(settings: Settings) -> Generator[TestClient, None, None]:
    """Yield a TestClient over a freshly built app with isolated databases.

    Each test gets its own uniquely named shared-memory database, so tests
    never see each other's users or posts.
    """
    db_name = f"test_postboard_{uuid.uuid4().hex}"
    user_store = UserStore(_shared_memory_url(db_name))
    post_store = PostStore(_shared_memory_url(db_name))
    app = create_app(settings=settings, user_store=user_store, post_store=post_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    user_store.close()
    post_store.close()
