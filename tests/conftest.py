from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi.testclient import TestClient

from src.adapters.auth.session_store import InMemorySessionStore, SQLiteSessionStore
from src.adapters.memory.store import InMemoryStorage
from src.adapters.sqlite.repos import SQLiteStorage
from src.api.main import create_app
from src.app_shell.config import Settings
from src.rules.models import Rules


class FixedClock:
    """Deterministic clock; advance() moves it forward."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self.current

    def advance(self, **kwargs: Any) -> None:
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def rules() -> Rules:
    return Rules()


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "data" / "bizmanager.db")


@pytest.fixture
def memory_storage(clock) -> InMemoryStorage:
    return InMemoryStorage(clock=clock)


@pytest.fixture
def sqlite_storage(db_path, clock) -> SQLiteStorage:
    storage = SQLiteStorage(db_path, clock=clock)
    storage.initialize()
    return storage


@pytest.fixture(params=["memory", "sqlite"])
def storage(request) -> Any:
    """The same contract, run against both backends."""
    return request.getfixturevalue(f"{request.param}_storage")


@pytest.fixture
def settings(db_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{db_path}",
        storage="memory",
        secret_key="test-secret",
        log_level="WARNING",
    )


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def app(settings, rules, memory_storage, session_store, clock):
    return create_app(
        settings=settings,
        rules=rules,
        storage=memory_storage,
        session_store=session_store,
        clock=clock,
    )


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def sqlite_client(settings, rules, sqlite_storage, db_path, clock) -> Iterator[TestClient]:
    app = create_app(
        settings=settings,
        rules=rules,
        storage=sqlite_storage,
        session_store=SQLiteSessionStore(db_path),
        clock=clock,
    )
    with TestClient(app) as c:
        yield c


def register(
    client: TestClient,
    username: str = "alice",
    password: str = "secret123",
    company_name: str = "Alice Corp",
    **extra: Any,
) -> dict[str, Any]:
    """Register through the API; the client keeps the session cookie."""
    resp = client.post(
        "/api/register",
        json={"username": username, "password": password, "companyName": company_name, **extra},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def auth_client(client) -> TestClient:
    """Client logged in as a freshly registered user."""
    register(client)
    return client


@pytest.fixture
def other_client(app) -> Iterator[TestClient]:
    """Second, independent browser session on the same app."""
    with TestClient(app) as c:
        register(c, username="bob", password="hunter22", company_name="Bob Ltd")
        yield c


@pytest.fixture
def register_user():
    return register
