"""User account and profile models."""

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from src.iotauth.models.base import UtcDatetime, active_rows_only, utc_now
from src.iotauth.models.enums import UserRole


class User(SQLModel, table=True):
    """User account, scoped to one tenant.

    Never hard-deleted. A banned or soft-deleted user cannot log in, refresh, or
    use an access token issued before the change.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index(
            "uq_users_tenant_username_active",
            "tenant_id",
            "username",
            unique=True,
            **active_rows_only(),
        ),
        Index(
            "uq_users_tenant_email_active",
            "tenant_id",
            "email",
            unique=True,
            **active_rows_only(),
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", index=True)
    username: str = Field(max_length=50, index=True)
    email: str = Field(max_length=255, index=True)
    hashed_password: str = Field(max_length=255)
    role: str = Field(default=UserRole.USER.value, max_length=20)
    is_banned: bool = Field(default=False)
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)
    deleted_at: UtcDatetime | None = Field(default=None)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def can_authenticate(self) -> bool:
        """False for banned or soft-deleted accounts."""
        return not self.is_banned and self.deleted_at is None


class UserDetails(SQLModel, table=True):
    """Profile data, 1:1 with an active user.

    Soft-deleted together with its user. A user re-registered under the same
    email gets a new row; lookups only ever read the row of the live user id.
    """

    __tablename__ = "user_details"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    full_name: str | None = Field(default=None, max_length=255)
    phone_number: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=500)
    date_of_birth: date | None = Field(default=None)
    profile_picture: str | None = Field(default=None, max_length=500)
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)
    deleted_at: UtcDatetime | None = Field(default=None)
