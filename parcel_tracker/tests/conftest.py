"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from parcel_tracker.app.main import app
from parcel_tracker.app.db.session import get_db, Base
from parcel_tracker.app.core.reliability import storage_circuit_breaker
from parcel_tracker.app.repositories.admin_repository import AdminRepository
from parcel_tracker.app.services.image_storage import LocalImageStorage, get_image_storage

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(test_engine.sync_engine, "connect", set_sqlite_pragma)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture(autouse=True)
def apply_overrides(session_factory, tmp_path):
    """Point the app at the test database and a temporary upload directory."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    storage = LocalImageStorage(str(tmp_path / "uploads"), "/uploads")

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_storage] = lambda: storage
    storage_circuit_breaker.reset_state()
    yield
    app.dependency_overrides = {}
    storage_circuit_breaker.reset_state()


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def admin_headers(client, db_session):
    """Seed an admin and return a bearer header for it."""
    await AdminRepository(db_session).create_admin(ADMIN_USERNAME, ADMIN_PASSWORD)

    response = await client.post("/v1/admin/login", json={
        "username": ADMIN_USERNAME,
        "password": ADMIN_PASSWORD
    })
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def tracking_payload():
    return {
        "name": "Electronics Package",
        "startLocation": "New York Warehouse",
        "endLocation": "Customer Address",
        "stopovers": ["Chicago Distribution Center", "Denver Hub"],
        "userName": "John Doe",
        "userEmail": "john.doe@email.com",
        "userPhone": "+1 (555) 123-4567"
    }


@pytest.fixture
async def created_tracking(client, admin_headers, tracking_payload):
    """A tracking with two stopovers (route length 4), as returned by the API."""
    response = await client.post("/v1/admin/trackings", json=tracking_payload, headers=admin_headers)
    assert response.status_code == 201
    return response.json()
