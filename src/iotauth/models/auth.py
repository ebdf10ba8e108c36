"""Session storage - persisted refresh tokens."""

from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.iotauth.models.base import UtcDatetime, utc_now


class RefreshToken(SQLModel, table=True):
    """One refresh token (by SHA-256 hash). The raw token is never stored."""

    __tablename__ = "refresh_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", index=True)
    token_hash: str = Field(max_length=255, unique=True, index=True)
    expires_at: UtcDatetime = Field(index=True)
    created_at: UtcDatetime = Field(default_factory=utc_now)
    revoked: bool = Field(default=False)
