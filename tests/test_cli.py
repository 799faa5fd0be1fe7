"""Tests for main.py -- the create-admin command and the API prefix setting.

The CLI reads DATABASE_URL through get_settings(), so each test points it at
a temporary SQLite file and clears the settings cache around the call.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import main
from api.main import create_app
from auth.service import AuthService
from auth.store import UserStore
from core.config import Settings, get_settings
from posts.store import PostStore


@pytest.fixture
def db_url(tmp_path, monkeypatch) -> str:
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


def test_create_admin_seeds_admin_account(db_url: str, capsys) -> None:
    assert main.main(["create-admin", "admin01", "--password", "Admin123!"]) == 0
    assert "admin01" in capsys.readouterr().out

    store = UserStore(db_url)
    try:
        user = store.get_by_username("admin01")
        assert user is not None
        assert user.role == "ADMIN"
        assert user.hashed_password != "Admin123!"
    finally:
        store.close()


def test_create_admin_rejects_weak_password(db_url: str, capsys) -> None:
    assert main.main(["create-admin", "admin01", "--password", "weak"]) == 1
    assert "password" in capsys.readouterr().out


def test_startup_seeds_default_admin(tmp_path) -> None:
    settings = Settings(
        debug=True,
        database_url=f"sqlite:///{tmp_path / 'seed.db'}",
        default_admin_username="admin01",
        default_admin_password="Admin123!",
        api_prefix="/api/v1",
    )
    with TestClient(create_app(settings=settings)) as client:
        resp = client.post("/api/v1/auth/login", json={"username": "admin01", "password": "Admin123!"})
        assert resp.status_code == 200, resp.text
        assert resp.json()["role"] == "ADMIN"
        assert client.get("/api/v1/health").status_code == 200


def test_create_admin_promotes_existing_user(db_url: str, capsys) -> None:
    store = UserStore(db_url)
    try:
        AuthService(store, get_settings()).signup("bob123", "Password1!")
    finally:
        store.close()

    assert main.main(["create-admin", "bob123", "--password", "Admin123!"]) == 0
    assert "role=ADMIN" in capsys.readouterr().out

    store = UserStore(db_url)
    try:
        assert store.get_by_username("bob123").role == "ADMIN"
    finally:
        store.close()


def test_startup_failure_closes_owned_stores(tmp_path, monkeypatch) -> None:
    closed: list[str] = []
    monkeypatch.setattr(UserStore, "close", lambda self: closed.append("users") or self.engine.dispose())
    monkeypatch.setattr(PostStore, "close", lambda self: closed.append("posts") or self.engine.dispose())

    def _broken_seed(self, username, password):
        raise RuntimeError("seed failed")

    monkeypatch.setattr(AuthService, "ensure_admin", _broken_seed)
    settings = Settings(
        debug=True,
        database_url=f"sqlite:///{tmp_path / 'broken.db'}",
        default_admin_username="admin01",
        default_admin_password="Admin123!",
    )
    with pytest.raises(RuntimeError):
        with TestClient(create_app(settings=settings)):
            pass
    assert sorted(closed) == ["posts", "users"]
