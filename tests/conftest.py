"""Shared fixtures.

Every test runs in its own temporary working directory with a private
SQLite file, a known API token and a fresh config cache.
"""

import pytest
from fastapi.testclient import TestClient

from lingoxp.config.app_config import clear_config_cache
from lingoxp.db.database import init_db
from lingoxp.web.api import create_app

TEST_TOKEN = "test-token"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Isolate cwd, config and database path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LINGOXP_CONFIG", raising=False)
    monkeypatch.setenv("LINGOXP_DB_PATH", str(tmp_path / "db" / "test.db"))
    monkeypatch.setenv("LINGOXP_API_TOKEN", TEST_TOKEN)
    clear_config_cache()
    yield tmp_path
    clear_config_cache()


@pytest.fixture
def db(tmp_path):
    """Initialized SQLite database."""
    return init_db(tmp_path / "db" / "test.db")


@pytest.fixture
def client():
    """Test client with lifespan (database init) executed."""
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    """Authorization header accepted by private routes."""
    return {"Authorization": f"Bearer {TEST_TOKEN}"}
