"""Repository for MqttCredential entity."""

from sqlmodel import select

from src.iotauth.models import MqttCredential
from src.iotauth.repositories.base import BaseRepository


class MqttCredentialRepository(BaseRepository[MqttCredential]):
    model = MqttCredential

    async def get_by_username(self, username: str) -> MqttCredential | None:
        """Any row with this username, soft-deleted included."""
        result = await self.session.execute(
            select(MqttCredential).where(MqttCredential.username == username)
        )
        return result.scalar_one_or_none()

    async def get_active_by_username(self, username: str) -> MqttCredential | None:
        result = await self.session.execute(
            select(MqttCredential).where(
                MqttCredential.username == username,
                MqttCredential.deleted_at.is_(None),  # type: ignore[union-attr]
            )
        )
        return result.scalar_one_or_none()

    async def list_active(self) -> list[MqttCredential]:
        result = await self.session.execute(
            select(MqttCredential)
            .where(MqttCredential.deleted_at.is_(None))  # type: ignore[union-attr]
            .order_by(MqttCredential.created_at)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())
