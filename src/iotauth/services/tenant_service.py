"""Tenant registry service."""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.iotauth.core.exceptions import ConflictError, NotFoundError
from src.iotauth.core.logging import get_logger
from src.iotauth.models import Tenant
from src.iotauth.models.base import utc_now
from src.iotauth.repositories import TenantRepository
from src.iotauth.schemas.tenant import TenantCreate, TenantUpdate

logger = get_logger(__name__)


class TenantService:
    """Tenant registry - business logic only.

    Creation is idempotent by name; deletion is not (a second delete is a 404).
    """

    def __init__(self, tenant_repo: TenantRepository, session: AsyncSession):
        self.tenant_repo = tenant_repo
        self.session = session

    async def create_or_get(self, data: TenantCreate) -> tuple[Tenant, bool]:
        """Create a tenant unless a live one already has the name.

        Returns (tenant, created). A concurrent create that wins the unique index
        race is resolved by fetching the winner's row.
        """
        existing = await self.tenant_repo.get_active_by_name(data.name)
        if existing is not None:
            return existing, False

        tenant = Tenant(name=data.name, description=data.description)
        try:
            self.tenant_repo.add(tenant)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            existing = await self.tenant_repo.get_active_by_name(data.name)
            if existing is None:
                raise
            return existing, False

        logger.info("Tenant created", tenant_id=str(tenant.id))
        return tenant, True

    async def get(self, tenant_id: UUID) -> Tenant:
        tenant = await self.tenant_repo.get_active_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found")
        return tenant

    async def list_active(self) -> list[Tenant]:
        return await self.tenant_repo.list_active()

    async def update(self, tenant_id: UUID, data: TenantUpdate) -> Tenant:
        tenant = await self.get(tenant_id)
        changes = data.model_dump(exclude_unset=True)

        new_name = changes.get("name")
        if new_name is not None and new_name != tenant.name:
            clash = await self.tenant_repo.get_active_by_name(new_name)
            if clash is not None:
                raise ConflictError("Tenant already exists")

        for field, value in changes.items():
            if field == "name" and value is None:
                continue
            setattr(tenant, field, value)
        tenant.updated_at = utc_now()

        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Tenant already exists") from e
        return tenant

    async def soft_delete(self, tenant_id: UUID) -> None:
        """Mark a tenant deleted. Its users are left as they are."""
        tenant = await self.get(tenant_id)
        now = utc_now()
        tenant.deleted_at = now
        tenant.updated_at = now
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Tenant deleted", tenant_id=str(tenant_id))
