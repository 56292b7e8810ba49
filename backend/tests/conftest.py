"""
ClientHub Backend - Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before any clienthub import, so the
       settings singleton, the engine and the service singletons all point
       at a throwaway SQLite file and a temporary asset directory.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:    AsyncMock standing in for AsyncSession
    ├── temp_storage:       fresh directory for AssetService tests
    ├── sample_image_bytes: tiny PNG payload
    ├── client_payload:     a complete, valid add_client body
    ├── db_schema:          creates/drops all tables on the test database
    ├── seeded_admin:       one row in supermasters (username/password below)
    ├── test_client:        HTTPX AsyncClient bound to the FastAPI app
    └── auth_headers:       Authorization header from a real /api/login
"""

import os
import tempfile

# Override settings for testing BEFORE any clienthub imports
_TEST_DIR = tempfile.mkdtemp(prefix="clienthub_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_DIR, "uploads")
os.environ["JWT_SECRET"] = "test-secret-that-is-long-enough-for-hs256-signing"
os.environ["JWT_EXPIRE_MINUTES"] = "60"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from clienthub.database import Base, async_session_factory, engine
from clienthub.models.admin import Supermaster
from clienthub.models.client import Client  # noqa: F401
from clienthub.services.security import password_hasher

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse-battery"


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        result = MagicMock()
        result.scalar_one_or_none.return_value = admin
        mock_db_session.execute.return_value = result
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Smallest PNG header; the store never inspects content."""
    return b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"


@pytest.fixture
def client_payload():
    """A complete client record as the admin UI sends it."""
    return {
        "client_name": "Acme Traders",
        "license_no": "LIC-1001",
        "issue_date": "2024-01-01",
        "expiry_date": "2025-01-01",
        "status": "active",
        "duration": "12",
        "plan_name": "Gold",
        "customers_login": "5",
        "sales_mgr_login": "2",
        "superadmin_login": "1",
        "client_address": "12 Market Road",
        "product_prefix": "PR",
        "customer_prefix": "CU",
        "sm_prefix": "SM",
        "adv_timer": 30,
        "hsn_length": 8,
        "roles": ["sales", "billing"],
        "ord_prefix": "ORD",
        "inv_prefix": "INV",
        "ord_prefix_num": 100,
        "default_due_on": 30,
        "max_due_on": 45,
    }


@pytest_asyncio.fixture
async def db_schema():
    """Creates every table before the test and drops them afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def seeded_admin(db_schema):
    async with async_session_factory() as session:
        session.add(
            Supermaster(username=ADMIN_USERNAME, password=password_hasher.hash(ADMIN_PASSWORD))
        )
        await session.commit()
    return {"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}


@pytest_asyncio.fixture
async def test_client(db_schema):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    ASGITransport does not run the lifespan; db_schema stands in for the
    migrations a deployment would apply.
    """
    from clienthub.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def auth_headers(test_client, seeded_admin):
    response = await test_client.post("/api/login", json=seeded_admin)
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
