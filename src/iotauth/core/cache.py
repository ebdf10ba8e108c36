"""Refresh-token blacklist in Redis.

The database row is the source of truth for revocation. Redis only lets the refresh
path reject a rotated or logged-out token without a row lock.
"""

from src.iotauth.core.redis import get_redis

PREFIX_TOKEN_BLACKLIST = "refresh_blacklist"


def _key(token_hash: str) -> str:
    return f"{PREFIX_TOKEN_BLACKLIST}:{token_hash}"


async def blacklist_token(token_hash: str, ttl: int) -> bool:
    """Blacklist one token hash until it would have expired anyway.

    Returns False when Redis is unavailable or the TTL is already spent.
    """
    if ttl <= 0:
        return False
    redis = await get_redis()
    if not redis:
        return False
    await redis.setex(_key(token_hash), ttl, "1")
    return True


async def is_token_blacklisted(token_hash: str) -> bool | None:
    """Check the blacklist.

    Returns:
        True: revoked.
        False: Redis confirmed the hash is not blacklisted.
        None: Redis unavailable, caller must rely on the database.
    """
    redis = await get_redis()
    if not redis:
        return None
    return await redis.exists(_key(token_hash)) > 0


async def blacklist_tokens_with_ttls(tokens_with_ttls: list[tuple[str, int]]) -> int:
    """Bulk blacklist (hash, ttl) pairs in one pipeline.

    Used when every session of a user is revoked (account deletion or ban).
    Returns the number of hashes written, 0 if Redis is unavailable.
    """
    live = [(token_hash, ttl) for token_hash, ttl in tokens_with_ttls if ttl > 0]
    if not live:
        return 0
    redis = await get_redis()
    if not redis:
        return 0

    pipe = redis.pipeline()
    for token_hash, ttl in live:
        pipe.setex(_key(token_hash), ttl, "1")
    await pipe.execute()
    return len(live)
