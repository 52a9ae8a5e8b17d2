"""Pytest configuration and fixtures."""

import os
import secrets

import pytest

# Generate a unique server key for this test run
_TEST_SERVER_KEY = f"test-only-{secrets.token_hex(16)}"

os.environ["PAPYRUS_SERVER_KEY"] = _TEST_SERVER_KEY
os.environ.setdefault("PAPYRUS_RATE_LIMIT_ENABLED", "false")

from fastapi.testclient import TestClient  # noqa: E402

from papyrusdb.database import get_engine  # noqa: E402
from papyrusdb.main import app  # noqa: E402
from papyrusdb.reconcile import SyncEngine  # noqa: E402
from papyrusdb.store import JsonFileStore  # noqa: E402


@pytest.fixture
def store_path(tmp_path):
    """Path of a JSON store file in a temporary directory."""
    return tmp_path / "data" / "papyrus-data.json"


@pytest.fixture
def store(store_path):
    """An empty JSON store."""
    return JsonFileStore(store_path)


@pytest.fixture
def engine(store):
    """Reconciliation engine over the temporary store."""
    return SyncEngine(store)


@pytest.fixture
def client(engine):
    """Test client whose requests hit the temporary store."""
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def server_key():
    return _TEST_SERVER_KEY


@pytest.fixture
def auth_headers():
    """Headers carrying the test server key."""
    return {"Authorization": f"Bearer {_TEST_SERVER_KEY}"}
