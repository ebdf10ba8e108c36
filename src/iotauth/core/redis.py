"""Redis client with connection pooling and graceful fallback.

Redis is optional. The token blacklist and the login attempt counter use it when
configured and fall back to the database or in-process state when it is not.
While Redis is down every worker keeps its own login counters, so a failed
connection is retried after ``redis_retry_seconds`` instead of being given up on
for the life of the process.
"""

import math
import time

from redis.asyncio import ConnectionPool, Redis

from src.iotauth.core.config import get_settings
from src.iotauth.core.logging import get_logger

logger = get_logger(__name__)

_pool: ConnectionPool | None = None
_redis: Redis | None = None
# Monotonic time before which no new connection is attempted
_retry_at: float = 0.0


async def _discard() -> None:
    global _pool, _redis
    if _redis:
        await _redis.aclose()
    if _pool:
        await _pool.disconnect()
    _redis = None
    _pool = None


async def get_redis() -> Redis | None:
    """Get Redis client. Returns None if unavailable (graceful degradation).

    The connection is lazily initialized on first call and reused thereafter.
    An unset REDIS_URL is never retried; a failed connect is retried once the
    cooldown has passed.
    """
    global _pool, _redis, _retry_at

    if _redis is not None:
        return _redis

    now = time.monotonic()
    if now < _retry_at:
        return None

    settings = get_settings()
    if not settings.redis_url:
        logger.info("Redis not configured (REDIS_URL not set)")
        _retry_at = math.inf
        return None

    try:
        _pool = ConnectionPool.from_url(
            settings.redis_url,
            max_connections=settings.redis_pool_size,
            decode_responses=True,
        )
        _redis = Redis(connection_pool=_pool)
        await _redis.ping()  # type: ignore[misc]
        logger.info("Redis connected successfully")
        return _redis

    except Exception as e:
        logger.warning(
            "Redis connection failed, falling back to non-Redis mode",
            error=str(e),
            retry_in=settings.redis_retry_seconds,
        )
        await _discard()
        _retry_at = now + settings.redis_retry_seconds
        return None


async def redis_status() -> str:
    """Round-trip check for /health.

    Returns "not_configured", "healthy", "unavailable" while a reconnect is
    pending, or "unhealthy: <error>" when the ping itself fails.
    """
    redis = await get_redis()
    if redis is None:
        return "unavailable" if get_settings().redis_url else "not_configured"
    try:
        await redis.ping()  # type: ignore[misc]
    except Exception as e:
        return f"unhealthy: {e!s}"
    return "healthy"


async def close_redis() -> None:
    """Close Redis connection pool. Called during application shutdown."""
    global _retry_at

    if _redis:
        logger.info("Redis connection closed")
    await _discard()
    _retry_at = 0.0


def reset_redis_state() -> None:
    """Reset Redis state so tests can reinitialize the connection."""
    global _pool, _redis, _retry_at
    _redis = None
    _pool = None
    _retry_at = 0.0
