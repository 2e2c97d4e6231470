"""
Shared test fixtures for Profile Manager API tests.

Provides the storage backends, a facade wired to them, test clients, and
auth header helpers. The database backend runs on in-memory SQLite.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from profile_manager.database import create_tables
from profile_manager.main import app
from profile_manager.middleware.rate_limit import reset_limiter
from profile_manager.storage import MemoryBackend, ProfileBackend, SqlBackend, StorageContext, StorageFacade

ADMIN = {"username": "admin", "password": "admin-pass"}
VIEWER = {"username": "viewer", "password": "viewer-pass"}


# --- Rate Limiter Reset Fixture ---


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Reset rate limiter before each test to ensure test isolation."""
    reset_limiter()
    yield


# --- Backend Fixtures ---


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created."""
    # StaticPool keeps every session on the same in-memory database
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def sql_backend(engine: AsyncEngine) -> SqlBackend:
    return SqlBackend(engine)


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


class FailingBackend(ProfileBackend):
    """
    Wraps a backend and makes the listed operations raise OperationalError.

    Simulates the database going away after the startup health check.
    """

    name = "primary"

    def __init__(self, inner: ProfileBackend, failing: set[str] | None = None):
        self.inner = inner
        self.failing = failing if failing is not None else {"*"}
        self.calls: list[str] = []

    def _fail(self, operation: str) -> None:
        self.calls.append(operation)
        if "*" in self.failing or operation in self.failing:
            raise OperationalError("SELECT 1", {}, ConnectionResetError("connection reset"))

    async def ping(self) -> bool:
        return True

    async def get_profiles(self, query=None, page=1, limit=6):
        self._fail("get_profiles")
        return await self.inner.get_profiles(query, page, limit)

    async def get_profile(self, profile_id):
        self._fail("get_profile")
        return await self.inner.get_profile(profile_id)

    async def create_profile(self, data):
        self._fail("create_profile")
        return await self.inner.create_profile(data)

    async def update_profile(self, profile_id, data):
        self._fail("update_profile")
        return await self.inner.update_profile(profile_id, data)

    async def delete_profile(self, profile_id):
        self._fail("delete_profile")
        return await self.inner.delete_profile(profile_id)

    async def get_preferences(self):
        self._fail("get_preferences")
        return await self.inner.get_preferences()

    async def save_preferences(self, values):
        self._fail("save_preferences")
        return await self.inner.save_preferences(values)

    async def get_user(self, username):
        self._fail("get_user")
        return await self.inner.get_user(username)

    async def ensure_user(self, username, password, role):
        self._fail("ensure_user")
        return await self.inner.ensure_user(username, password, role)


@pytest.fixture
def failing_backend_factory():
    """Factory fixture wrapping a backend so chosen operations fail."""

    def _factory(inner: ProfileBackend, failing: set[str] | None = None) -> FailingBackend:
        return FailingBackend(inner, failing)

    return _factory


async def _seed(facade: StorageFacade) -> None:
    await facade.seed_user(ADMIN["username"], ADMIN["password"], "admin")
    await facade.seed_user(VIEWER["username"], VIEWER["password"], "viewer")


@pytest_asyncio.fixture
async def facade(sql_backend: SqlBackend, memory_backend: MemoryBackend) -> StorageFacade:
    """Facade with a healthy database primary and an in-memory fallback."""
    storage = StorageFacade(fallback=memory_backend, primary=sql_backend)
    await storage.check_health()
    await _seed(storage)
    return storage


# --- Client Fixtures ---


@asynccontextmanager
async def _client_for(storage: StorageFacade) -> AsyncIterator[AsyncClient]:
    app.state.storage = StorageContext(storage)
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True,
    ) as client:
        yield client
    del app.state.storage


@pytest_asyncio.fixture
async def async_client(facade: StorageFacade) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for the app, backed by the database facade."""
    async with _client_for(facade) as client:
        yield client


@pytest_asyncio.fixture
async def degraded_client(
    memory_backend: MemoryBackend,
    sql_backend: SqlBackend,
    failing_backend_factory,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client whose database fails every call after startup."""
    storage = StorageFacade(fallback=memory_backend, primary=failing_backend_factory(sql_backend))
    await storage.check_health()
    await _seed(storage)
    async with _client_for(storage) as client:
        yield client


# --- Authentication Helper Fixtures ---


@pytest.fixture
def auth_headers():
    """Factory fixture for creating bearer headers."""

    def _auth_headers(username: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {username}"}

    return _auth_headers


@pytest.fixture
def admin_headers(auth_headers) -> dict[str, str]:
    return auth_headers(ADMIN["username"])


@pytest.fixture
def viewer_headers(auth_headers) -> dict[str, str]:
    return auth_headers(VIEWER["username"])


@pytest.fixture
def admin_credentials() -> dict[str, str]:
    return dict(ADMIN)


@pytest.fixture
def viewer_credentials() -> dict[str, str]:
    return dict(VIEWER)


# --- Payload Fixtures ---


@pytest.fixture
def profile_payload():
    """Factory for valid profile payloads."""

    def _profile_payload(**overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "profileId": "p1",
            "name": "Alice Smith",
            "description": "Profile description",
        }
        payload.update(overrides)
        return payload

    return _profile_payload


@pytest.fixture
def document_payload():
    """Factory for valid document payloads."""

    def _document_payload(doc_id: str = "doc-1", **overrides: Any) -> dict[str, Any]:
        payload = {
            "id": doc_id,
            "name": "Resume",
            "type": "application/pdf",
            "url": "https://example.com/resume.pdf",
            "dateAdded": "2026-10-19T12:00:00Z",
        }
        payload.update(overrides)
        return payload

    return _document_payload
