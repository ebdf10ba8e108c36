"""Lazy Redis client with graceful fallback."""

import math
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from src.iotauth.core import redis as redis_module
from src.iotauth.core.redis import close_redis, get_redis, redis_status, reset_redis_state

pytestmark = pytest.mark.unit

UNREACHABLE = "redis://127.0.0.1:1/0"


def _settings(redis_url: str | None = None, retry_seconds: int = 30) -> SimpleNamespace:
    return SimpleNamespace(
        redis_url=redis_url, redis_pool_size=1, redis_retry_seconds=retry_seconds
    )


@pytest.fixture(autouse=True)
def _clean_state():
    reset_redis_state()
    yield
    reset_redis_state()


class TestGetRedis:
    async def test_not_configured_is_never_retried(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(redis_module, "get_settings", lambda: _settings())

        assert await get_redis() is None
        assert math.isinf(redis_module._retry_at)

    async def test_unreachable_server_waits_for_the_cooldown(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls = 0

        def _counting_settings() -> SimpleNamespace:
            nonlocal calls
            calls += 1
            return _settings(UNREACHABLE)

        monkeypatch.setattr(redis_module, "get_settings", _counting_settings)

        assert await get_redis() is None
        assert await get_redis() is None
        assert calls == 1
        assert redis_module._redis is None
        assert redis_module._pool is None

    async def test_unreachable_server_is_retried_after_the_cooldown(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls = 0

        def _counting_settings() -> SimpleNamespace:
            nonlocal calls
            calls += 1
            return _settings(UNREACHABLE, retry_seconds=0)

        monkeypatch.setattr(redis_module, "get_settings", _counting_settings)

        assert await get_redis() is None
        assert await get_redis() is None
        assert calls == 2


class TestRedisStatus:
    async def test_not_configured(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(redis_module, "get_settings", lambda: _settings())

        assert await redis_status() == "not_configured"

    async def test_configured_but_down(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(redis_module, "get_settings", lambda: _settings(UNREACHABLE))

        assert await redis_status() == "unavailable"

    async def test_healthy(self, mock_redis) -> None:
        assert await redis_status() == "healthy"

    async def test_failed_ping(self, monkeypatch: pytest.MonkeyPatch) -> None:
        client = AsyncMock()
        client.ping.side_effect = ConnectionError("connection reset")

        async def _get_client() -> AsyncMock:
            return client

        monkeypatch.setattr(redis_module, "get_redis", _get_client)

        assert await redis_status() == "unhealthy: connection reset"


class TestCloseRedis:
    async def test_close_without_connection(self) -> None:
        await close_redis()

        assert redis_module._retry_at == 0.0

    async def test_close_allows_a_new_attempt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(redis_module, "get_settings", lambda: _settings())
        await get_redis()

        await close_redis()

        assert redis_module._retry_at == 0.0
