"""Repository for Tenant entity."""

from sqlmodel import select

from src.iotauth.models import Tenant
from src.iotauth.repositories.base import BaseRepository


class TenantRepository(BaseRepository[Tenant]):
    """Repository for Tenant entity. Soft-deleted tenants are invisible here."""

    model = Tenant

    async def get_active_by_name(self, name: str) -> Tenant | None:
        result = await self.session.execute(
            select(Tenant).where(
                Tenant.name == name,
                Tenant.deleted_at.is_(None),  # type: ignore[union-attr]
            )
        )
        return result.scalar_one_or_none()

    async def list_active(self) -> list[Tenant]:
        """All tenants that are not soft-deleted, oldest first."""
        result = await self.session.execute(
            select(Tenant)
            .where(Tenant.deleted_at.is_(None))  # type: ignore[union-attr]
            .order_by(Tenant.created_at)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())
