"""Repository for RefreshToken entity."""

from datetime import timedelta
from uuid import UUID

from sqlalchemy import and_, delete, or_, update
from sqlmodel import select

from src.iotauth.models import RefreshToken
from src.iotauth.models.base import utc_now
from src.iotauth.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Repository for persisted refresh tokens."""

    model = RefreshToken

    async def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        """Get refresh token by its hash, whatever its state."""
        result = await self.session.execute(
            select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    async def get_valid_by_hash(
        self, token_hash: str, for_update: bool = False
    ) -> RefreshToken | None:
        """Get a non-revoked, non-expired token by hash.

        Args:
            token_hash: The hashed token to look up
            for_update: Lock the row so two concurrent refreshes of the same
                        token cannot both rotate it
        """
        query = select(RefreshToken).where(
            RefreshToken.token_hash == token_hash,
            RefreshToken.revoked == False,  # noqa: E712
            RefreshToken.expires_at > utc_now(),
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_active_tokens_for_user(self, user_id: UUID) -> list[RefreshToken]:
        """Live tokens of a user, used to blacklist them with their remaining TTLs."""
        result = await self.session.execute(
            select(RefreshToken).where(
                RefreshToken.user_id == user_id,
                RefreshToken.revoked == False,  # noqa: E712
                RefreshToken.expires_at > utc_now(),
            )
        )
        return list(result.scalars().all())

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Revoke every non-revoked token of a user. Returns the number revoked."""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id)  # type: ignore[arg-type]
            .where(RefreshToken.revoked == False)  # type: ignore[arg-type]  # noqa: E712
            .values(revoked=True)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def delete_stale(self, retention_days: int) -> int:
        """Delete tokens expired, or revoked and created, more than retention_days ago.

        DELETE is idempotent; a second run finds nothing.
        """
        cutoff = utc_now() - timedelta(days=retention_days)
        stmt = delete(RefreshToken).where(
            or_(
                RefreshToken.expires_at < cutoff,  # type: ignore[arg-type]
                and_(
                    RefreshToken.revoked == True,  # type: ignore[arg-type]  # noqa: E712
                    RefreshToken.created_at < cutoff,  # type: ignore[arg-type]
                ),
            )
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]
