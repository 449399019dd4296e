import asyncio

import pytest
from fastapi.testclient import TestClient

from app.auth import create_session_token
from app.cache import _page_cache
from app.core.config import get_settings
from app.db import get_connection, get_user
from app.main import app
from app.seed import seed


@pytest.fixture
def settings_env(tmp_path, monkeypatch):
    """Temporary SQLite file + cache dir for each test."""
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "invoices.db"))
    monkeypatch.setenv("CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("AUTH_SECRET", "test-secret")
    get_settings.cache_clear()
    _page_cache.cache_clear()

    yield get_settings()

    get_settings.cache_clear()
    _page_cache.cache_clear()


@pytest.fixture
def seeded_db(settings_env):
    seed()
    return settings_env


@pytest.fixture
def client(seeded_db) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_client(client: TestClient) -> TestClient:
    user = get_user("user@nextmail.com")
    token = create_session_token(user["id"], user["email"])
    client.headers["Authorization"] = f"Bearer {token}"
    return client


@pytest.fixture
def run():
    return asyncio.run


@pytest.fixture
def fetch_all(settings_env):
    def _fetch(statement, params=()):
        conn = get_connection()
        try:
            return conn.execute(statement, params).fetchall()
        finally:
            conn.close()

    return _fetch
