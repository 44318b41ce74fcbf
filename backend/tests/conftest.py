"""Shared fixtures: in-memory SQLite for the durable store, stub outages, API clients."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from launchlog.core.database import Base, create_session_factory
from launchlog.core.errors import BackendUnavailableError
from launchlog.main import create_app
from launchlog.models import user, user_data  # noqa: F401 - registers tables
from launchlog.storage.resilient_store import ResilientStore
from launchlog.storage.sql_store import SqlUserDataStore


class UnavailableStore:
    """Durable store whose every call fails as if the database went away"""

    def __init__(self):
        self.calls = []

    def __getattr__(self, operation):
        def fail(*args):
            self.calls.append(operation)
            raise BackendUnavailableError("connection refused")
        return fail


@pytest.fixture
def session_factory():
    # StaticPool keeps one connection, so every session sees the same in-memory database
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def sql_store(session_factory):
    return SqlUserDataStore(session_factory)


@pytest.fixture(params=["durable", "fallback", "outage"])
def store(request, sql_store):
    """
    The three ways the API can be running:

    durable  - database connected and healthy
    fallback - no database configured, mirror only
    outage   - database connected at startup but failing every call now
    """
    if request.param == "durable":
        return ResilientStore(durable=sql_store)
    if request.param == "fallback":
        return ResilientStore()
    return ResilientStore(durable=UnavailableStore())


@pytest.fixture
def client(store):
    return TestClient(create_app(store))


def register(client, email="a@x.com", password="secret1", name="Ann"):
    response = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
