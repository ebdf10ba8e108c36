"""Repositories for User and UserDetails."""

from uuid import UUID

from sqlalchemy import update
from sqlmodel import select

from src.iotauth.models import User, UserDetails
from src.iotauth.models.base import utc_now
from src.iotauth.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entity. Lookups ignore soft-deleted rows."""

    model = User

    async def find_active_by_identifier(
        self, identifier: str, tenant_id: UUID | None = None
    ) -> list[User]:
        """Find live users by email (when identifier contains "@") or username.

        Without a tenant the lookup spans all tenants and may return several rows;
        the caller decides what ambiguity means.
        """
        if "@" in identifier:
            condition = User.email == identifier.lower()
        else:
            condition = User.username == identifier
        query = select(User).where(condition, User.deleted_at.is_(None))  # type: ignore[union-attr]
        if tenant_id is not None:
            query = query.where(User.tenant_id == tenant_id)
        result = await self.session.execute(query.limit(2))
        return list(result.scalars().all())

    async def exists_active_username(
        self, tenant_id: UUID, username: str, exclude_id: UUID | None = None
    ) -> bool:
        query = select(User.id).where(
            User.tenant_id == tenant_id,
            User.username == username,
            User.deleted_at.is_(None),  # type: ignore[union-attr]
        )
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.first() is not None

    async def exists_active_email(
        self, tenant_id: UUID, email: str, exclude_id: UUID | None = None
    ) -> bool:
        query = select(User.id).where(
            User.tenant_id == tenant_id,
            User.email == email.lower(),
            User.deleted_at.is_(None),  # type: ignore[union-attr]
        )
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.first() is not None

    async def list_active_by_tenant(self, tenant_id: UUID) -> list[User]:
        """All live users of a tenant, oldest first."""
        result = await self.session.execute(
            select(User)
            .where(User.tenant_id == tenant_id, User.deleted_at.is_(None))  # type: ignore[union-attr]
            .order_by(User.created_at)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())


class UserDetailsRepository(BaseRepository[UserDetails]):
    """Repository for UserDetails entity."""

    model = UserDetails

    async def get_active_for_user(self, user_id: UUID) -> UserDetails | None:
        result = await self.session.execute(
            select(UserDetails)
            .where(
                UserDetails.user_id == user_id,
                UserDetails.deleted_at.is_(None),  # type: ignore[union-attr]
            )
            .order_by(UserDetails.created_at.desc())  # type: ignore[attr-defined]
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def soft_delete_for_user(self, user_id: UUID) -> int:
        """Soft delete every live details row of a user. Returns rows touched."""
        now = utc_now()
        stmt = (
            update(UserDetails)
            .where(UserDetails.user_id == user_id)  # type: ignore[arg-type]
            .where(UserDetails.deleted_at.is_(None))  # type: ignore[union-attr]
            .values(deleted_at=now, updated_at=now)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]
