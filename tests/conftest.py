"""Root test fixtures shared across all test types.

Environment defaults are set before any application import: settings, the
password hasher and the slowapi limiter are all built at import time.
Integration fixtures (database, HTTP client) live in tests/integration/conftest.py.
"""

import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-characters")
os.environ.setdefault("API_KEY", "test-api-key")
os.environ.setdefault("TENANT_SECRET_KEY", "test-tenant-secret")
# Cheap Argon2 parameters; hashing cost is not under test
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("ARGON2_PARALLELISM", "1")

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import AsyncGenerator, Generator

import pytest
from fakeredis import aioredis as fakeredis_aio
from redis.asyncio import Redis

from src.iotauth.core import rate_limit
from src.iotauth.core import redis as redis_core
from src.iotauth.core.config import get_settings

get_settings.cache_clear()

# Every module that imported get_redis by name
_GET_REDIS_TARGETS = (
    "src.iotauth.core.redis.get_redis",
    "src.iotauth.core.cache.get_redis",
    "src.iotauth.core.rate_limit.get_redis",
)


@pytest.fixture(autouse=True)
def reset_login_failures() -> Generator[None]:
    """Clear the in-memory login failure windows around every test."""
    rate_limit._failure_windows.clear()
    rate_limit._writes_since_prune = 0
    yield
    rate_limit._failure_windows.clear()
    rate_limit._writes_since_prune = 0


# --- Redis Test Fixtures (shared) ---


@pytest.fixture
async def fake_redis() -> AsyncGenerator[Redis]:
    """In-memory Redis that behaves like a real server."""
    client = fakeredis_aio.FakeRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
async def mock_redis(fake_redis: Redis, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Redis]:
    """Patch get_redis() everywhere to return the fakeredis client."""
    redis_core.reset_redis_state()

    async def _get_fake_redis() -> Redis:
        return fake_redis

    for target in _GET_REDIS_TARGETS:
        monkeypatch.setattr(target, _get_fake_redis)
    yield fake_redis
    redis_core.reset_redis_state()


@pytest.fixture
async def mock_redis_unavailable(monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[None]:
    """Patch get_redis() everywhere to return None (Redis not configured or down)."""
    redis_core.reset_redis_state()

    async def _get_none() -> None:
        return None

    for target in _GET_REDIS_TARGETS:
        monkeypatch.setattr(target, _get_none)
    yield
    redis_core.reset_redis_state()
