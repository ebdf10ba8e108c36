"""Token service - issue, rotate, verify and revoke session tokens."""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.iotauth.core.cache import (
    blacklist_token,
    blacklist_tokens_with_ttls,
    is_token_blacklisted,
)
from src.iotauth.core.exceptions import AuthenticationError
from src.iotauth.core.logging import get_logger
from src.iotauth.core.security import (
    TokenType,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_token,
)
from src.iotauth.models import RefreshToken, User
from src.iotauth.models.base import utc_now
from src.iotauth.repositories import RefreshTokenRepository, UserRepository

logger = get_logger(__name__)


def _remaining_seconds(db_token: RefreshToken) -> int:
    return int((db_token.expires_at - utc_now()).total_seconds())


class TokenService:
    """Access and refresh token lifecycle.

    The database row is authoritative for refresh token state; the Redis blacklist
    is only a fast-reject cache written after each commit. Every refresh failure
    surfaces as the same AuthenticationError so callers learn nothing about why.
    """

    def __init__(
        self,
        token_repo: RefreshTokenRepository,
        user_repo: UserRepository,
        session: AsyncSession,
    ):
        self.token_repo = token_repo
        self.user_repo = user_repo
        self.session = session
        self._pending_blacklist: list[tuple[str, int]] = []

    def issue(self, user: User) -> tuple[str, str]:
        """Mint an access/refresh pair and stage the refresh row.

        Does not commit; the caller's unit of work does.
        """
        access_token = create_access_token(user.id, user.tenant_id, user.role)
        refresh_token, expires_at = create_refresh_token(user.id, user.tenant_id)
        self.token_repo.add(
            RefreshToken(
                user_id=user.id,
                tenant_id=user.tenant_id,
                token_hash=hash_token(refresh_token),
                expires_at=expires_at,
            )
        )
        return access_token, refresh_token

    async def refresh(self, refresh_token: str | None) -> tuple[User, str, str]:
        """Rotate a refresh token. Returns (user, new access token, new refresh token).

        Raises:
            AuthenticationError: For any missing, malformed, expired, revoked, unknown
                or blacklisted token, or when its owner can no longer log in.
        """
        if not refresh_token:
            raise AuthenticationError()

        payload = decode_token(refresh_token, TokenType.REFRESH)
        if payload is None:
            logger.info("Refresh rejected", reason="invalid_token")
            raise AuthenticationError()

        token_hash = hash_token(refresh_token)
        if await self._is_blacklisted(token_hash):
            logger.info("Refresh rejected", reason="blacklisted")
            raise AuthenticationError()

        try:
            # Row lock: two concurrent refreshes of one token cannot both rotate it
            db_token = await self.token_repo.get_valid_by_hash(token_hash, for_update=True)
            if db_token is None or str(db_token.user_id) != payload.get("sub"):
                logger.info("Refresh rejected", reason="unknown_or_revoked")
                raise AuthenticationError()

            user = await self.user_repo.get_by_id(db_token.user_id)
            if user is None or not user.can_authenticate:
                logger.info(
                    "Refresh rejected", reason="user_ineligible", user_id=str(db_token.user_id)
                )
                raise AuthenticationError()

            db_token.revoked = True
            access_token, new_refresh_token = self.issue(user)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self._blacklist(token_hash, _remaining_seconds(db_token))
        logger.info("Refresh token rotated", user_id=str(user.id))
        return user, access_token, new_refresh_token

    def verify(self, access_token: str | None) -> dict[str, Any]:
        """Decode an access token. Returns its claims.

        Raises:
            AuthenticationError: If the token is missing, malformed, expired or not
                an access token, or lacks a subject or tenant.
        """
        if not access_token:
            raise AuthenticationError()
        payload = decode_token(access_token, TokenType.ACCESS)
        if payload is None or not payload.get("sub") or not payload.get("tenant_id"):
            raise AuthenticationError()
        try:
            UUID(payload["sub"])
            UUID(payload["tenant_id"])
        except ValueError as e:
            raise AuthenticationError() from e
        return payload

    async def revoke(self, refresh_token: str | None) -> bool:
        """Revoke one refresh token. Idempotent; returns False when nothing changed."""
        if not refresh_token:
            return False
        token_hash = hash_token(refresh_token)
        try:
            db_token = await self.token_repo.get_by_hash(token_hash)
            if db_token is None or db_token.revoked:
                return False
            db_token.revoked = True
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self._blacklist(token_hash, _remaining_seconds(db_token))
        return True

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Revoke every session of a user within the caller's transaction.

        Does not commit. Call blacklist_pending() after the commit to push the
        revoked hashes to Redis.
        """
        live_tokens = await self.token_repo.get_active_tokens_for_user(user_id)
        self._pending_blacklist = [(t.token_hash, _remaining_seconds(t)) for t in live_tokens]
        return await self.token_repo.revoke_all_for_user(user_id)

    async def blacklist_pending(self) -> None:
        pending = self._pending_blacklist
        self._pending_blacklist = []
        if not pending:
            return
        try:
            await blacklist_tokens_with_ttls(pending)
        except Exception as e:
            # DB is already committed and authoritative
            logger.warning(
                "Failed to blacklist tokens in Redis", error=str(e), token_count=len(pending)
            )

    async def _blacklist(self, token_hash: str, ttl: int) -> None:
        try:
            await blacklist_token(token_hash, ttl)
        except Exception as e:
            logger.warning("Failed to blacklist token in Redis", error=str(e))

    async def _is_blacklisted(self, token_hash: str) -> bool:
        try:
            return await is_token_blacklisted(token_hash) is True
        except Exception as e:
            # Fall through to the database check
            logger.warning("Redis blacklist read failed", error=str(e))
            return False
