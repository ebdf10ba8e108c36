"""MQTT broker credentials - a namespace separate from users and tenants."""

from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.iotauth.models.base import UtcDatetime, utc_now


class MqttCredential(SQLModel, table=True):
    """Broker login.

    The unique constraint covers soft-deleted rows too: a deleted username stays taken.
    """

    __tablename__ = "mqtt_credentials"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(max_length=64, unique=True, index=True)
    hashed_password: str = Field(max_length=255)
    is_superuser: bool = Field(default=False)
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)
    deleted_at: UtcDatetime | None = Field(default=None)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
