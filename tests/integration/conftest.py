"""Integration test fixtures: an in-memory SQLite database and an HTTP client.

Each test gets a fresh database. The engine uses a single shared connection
(StaticPool), so the app and the test helpers see the same data once committed.
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import SQLModel

from src.iotauth.core import db
from src.iotauth.core import redis as redis_core
from src.iotauth.core.health import reset_health_cache
from src.iotauth.main import app
from src.iotauth.models import Tenant, User
from tests.helpers import create_tenant_with_user


@pytest.fixture(autouse=True)
async def _reset_redis_between_tests() -> AsyncGenerator[None]:
    """Drop any Redis client bound to a previous test's event loop."""
    redis_core.reset_redis_state()
    reset_health_cache()
    yield
    await redis_core.close_redis()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database with every table created from model metadata."""
    await db.dispose_engine()
    test_engine = db.get_engine()
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await db.dispose_engine()


@pytest.fixture
async def client(engine: AsyncEngine) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
async def tenant_user(engine: AsyncEngine) -> tuple[Tenant, User]:
    """An active tenant with one regular user (password DEFAULT_TEST_PASSWORD)."""
    return await create_tenant_with_user()
