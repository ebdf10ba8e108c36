"""Refresh token sweeping."""

from temporalio import activity

from src.iotauth.core.db import get_session
from src.iotauth.repositories import RefreshTokenRepository


@activity.defn
async def cleanup_refresh_tokens(retention_days: int) -> int:
    """Delete refresh tokens expired, or revoked, more than retention_days ago.

    Idempotent: a second run finds nothing. Token validity never depends on this
    having run; the refresh path checks expiry and revocation itself.

    Returns:
        Number of rows deleted
    """
    activity.logger.info("Cleaning up refresh tokens older than %d days", retention_days)

    async with get_session() as session:
        repo = RefreshTokenRepository(session)
        try:
            count = await repo.delete_stale(retention_days)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    activity.logger.info("Deleted %d stale refresh tokens", count)
    return count
