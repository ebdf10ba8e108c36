"""Rate limiting with optional Redis backend.

Two layers:
1. slowapi per-IP limits on cheap-to-abuse endpoints (register, refresh).
   Disabled in the testing environment.
2. A per-identity login attempt counter. Each login reserves a slot before the
   password is checked; a fixed window opens on the first reservation. Once
   ``login_max_failures`` reserved attempts have failed, the identity is locked for
   ``login_lockout_seconds``. Redis keeps the counter when configured, otherwise an
   in-process dict guarded by an asyncio.Lock does.
"""

import asyncio
import time
from dataclasses import dataclass

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.iotauth.core.config import get_settings
from src.iotauth.core.logging import get_logger
from src.iotauth.core.redis import get_redis

logger = get_logger(__name__)

PREFIX_LOGIN_FAILURES = "login_failures"

# In-memory fallback: identity -> {"count": n, "expires_at": epoch seconds}
_failure_windows: dict[str, dict[str, float]] = {}
_failure_lock = asyncio.Lock()

# Expired entries are swept once every this many reservations
_PRUNE_EVERY = 512
_writes_since_prune = 0


@dataclass(frozen=True)
class LoginAttempt:
    """A reserved login attempt. retry_after > 0 means the identity is locked."""

    identity: str
    count: int
    retry_after: int = 0


def get_rate_limit_key(request: Request) -> str:
    """Key slowapi buckets on client IP only, never on caller-controlled headers."""
    return get_remote_address(request) or "unknown"


def create_limiter() -> Limiter:
    """Create the per-IP limiter, Redis-backed when REDIS_URL is set."""
    settings = get_settings()

    if settings.app_env == "testing":
        logger.info("Rate limiter disabled (testing environment)")
        return Limiter(key_func=get_rate_limit_key, enabled=False)

    if settings.redis_url:
        logger.info("Rate limiter using Redis backend")
        return Limiter(key_func=get_rate_limit_key, storage_uri=settings.redis_url)
    logger.info("Rate limiter using in-memory backend (not distributed)")
    return Limiter(key_func=get_rate_limit_key)


limiter = create_limiter()


def login_identity(identifier: str, tenant_id: object | None = None) -> str:
    """Counter key for a login identity: tenant scope plus case-folded identifier."""
    scope = str(tenant_id) if tenant_id else "*"
    return f"{scope}:{identifier.strip().lower()}"


def _redis_key(identity: str) -> str:
    return f"{PREFIX_LOGIN_FAILURES}:{identity}"


# --- in-memory backend ---


def _prune_expired(now: float) -> None:
    """Drop every expired window. Caller must hold _failure_lock."""
    expired = [key for key, entry in _failure_windows.items() if entry["expires_at"] <= now]
    for key in expired:
        del _failure_windows[key]
    if expired:
        logger.debug("Pruned expired login windows", count=len(expired))


async def _memory_reserve(identity: str, max_failures: int, window: int) -> LoginAttempt:
    global _writes_since_prune
    now = time.time()
    async with _failure_lock:
        _writes_since_prune += 1
        if _writes_since_prune >= _PRUNE_EVERY:
            _writes_since_prune = 0
            _prune_expired(now)

        entry = _failure_windows.get(identity)
        if entry is None or entry["expires_at"] <= now:
            entry = {"count": 0, "expires_at": now + window}
            _failure_windows[identity] = entry
        entry["count"] += 1
        count = int(entry["count"])
        if count <= max_failures:
            return LoginAttempt(identity, count)
        return LoginAttempt(identity, count, max(int(entry["expires_at"] - now), 1))


async def _memory_lock_out(identity: str, lockout: int) -> None:
    async with _failure_lock:
        entry = _failure_windows.get(identity)
        if entry is not None:
            entry["expires_at"] = time.time() + lockout


async def _memory_reset(identity: str) -> None:
    async with _failure_lock:
        _failure_windows.pop(identity, None)


# --- Redis backend ---


async def _redis_reserve(
    redis: object, identity: str, max_failures: int, window: int
) -> LoginAttempt:
    # MULTI/EXEC: the increment and the window expiry land together, and
    # EXPIRE NX keeps the window anchored at the first attempt.
    key = _redis_key(identity)
    pipe = redis.pipeline(transaction=True)  # type: ignore[attr-defined]
    pipe.incr(key)
    pipe.expire(key, window, nx=True)
    pipe.ttl(key)
    count, _, ttl = await pipe.execute()
    count = int(count)
    if count <= max_failures:
        return LoginAttempt(identity, count)
    return LoginAttempt(identity, count, int(ttl) if ttl and ttl > 0 else window)


# --- public API ---


async def reserve_login_attempt(identity: str) -> LoginAttempt:
    """Atomically count one attempt and compare it against the threshold.

    Runs before the credential check, so concurrent attempts cannot all slip past
    a lockout that none of them has recorded yet.
    """
    settings = get_settings()
    max_failures = settings.login_max_failures
    window = settings.login_failure_window_seconds

    redis = await get_redis()
    if redis:
        try:
            return await _redis_reserve(redis, identity, max_failures, window)
        except Exception as e:
            logger.warning(
                "Redis login limiter write failed, falling back to in-memory", error=str(e)
            )
    return await _memory_reserve(identity, max_failures, window)


async def lock_out_if_exhausted(attempt: LoginAttempt) -> bool:
    """After a failed credential check, start the lockout if this was the last allowed try."""
    settings = get_settings()
    if attempt.count < settings.login_max_failures:
        return False

    lockout = settings.login_lockout_seconds
    redis = await get_redis()
    if redis:
        try:
            await redis.expire(_redis_key(attempt.identity), lockout)
            return True
        except Exception as e:
            logger.warning(
                "Redis login limiter write failed, falling back to in-memory", error=str(e)
            )
    await _memory_lock_out(attempt.identity, lockout)
    return True


async def reset_login_failures(identity: str) -> None:
    """Clear the identity's window after a successful login."""
    redis = await get_redis()
    if redis:
        try:
            await redis.delete(_redis_key(identity))
        except Exception as e:
            logger.warning("Redis login limiter reset failed", error=str(e))
    await _memory_reset(identity)
