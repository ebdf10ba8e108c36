"""Tenant model - the isolation boundary users belong to."""

from uuid import UUID, uuid4

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from src.iotauth.models.base import UtcDatetime, active_rows_only, utc_now

TENANT_NAME_MAX_LENGTH = 255


class Tenant(SQLModel, table=True):
    """Tenant registry entry.

    Names are unique among active tenants only, so a soft-deleted name can be reused.
    """

    __tablename__ = "tenants"
    __table_args__ = (
        Index("uq_tenants_name_active", "name", unique=True, **active_rows_only()),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=TENANT_NAME_MAX_LENGTH, index=True)
    description: str | None = Field(default=None, max_length=1000)
    is_active: bool = Field(default=True)
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)
    deleted_at: UtcDatetime | None = Field(default=None)

    @property
    def is_deleted(self) -> bool:
        """Check if tenant is soft-deleted."""
        return self.deleted_at is not None
