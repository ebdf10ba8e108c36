"""MQTT broker credential management and the broker's auth/ACL hooks."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.iotauth.core.exceptions import ConflictError, NotFoundError
from src.iotauth.core.logging import get_logger
from src.iotauth.core.security import DUMMY_PASSWORD_HASH, hash_password, verify_password
from src.iotauth.models import MqttCredential
from src.iotauth.models.base import utc_now
from src.iotauth.models.enums import MqttAccess, MqttDecision
from src.iotauth.repositories import MqttCredentialRepository
from src.iotauth.schemas.mqtt import MqttCreateRequest

logger = get_logger(__name__)


def topic_owned_by(topic: str, username: str) -> bool:
    """True when topic lives under the user's own ``users/{username}/`` namespace."""
    return topic.startswith(f"users/{username}/")


class MqttService:
    """Broker credentials.

    ``check`` and ``acl`` return a decision rather than raising: the broker treats
    ``ignore`` as "ask the next backend", which is different from ``deny``.
    """

    def __init__(self, mqtt_repo: MqttCredentialRepository, session: AsyncSession):
        self.mqtt_repo = mqtt_repo
        self.session = session

    async def create(self, data: MqttCreateRequest) -> MqttCredential:
        # Deleted usernames stay reserved
        if await self.mqtt_repo.get_by_username(data.username) is not None:
            raise ConflictError("Username already exists")

        credential = MqttCredential(
            username=data.username,
            hashed_password=hash_password(data.password),
            is_superuser=data.is_superuser,
        )
        try:
            self.mqtt_repo.add(credential)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Username already exists") from e

        logger.info("MQTT credential created", mqtt_username=credential.username)
        return credential

    async def check(
        self, username: str, password: str
    ) -> tuple[MqttDecision, MqttCredential | None]:
        """Authenticate a broker client.

        Returns (IGNORE, None) for unknown or deleted usernames, (DENY, None) for a
        wrong password and (ALLOW, credential) otherwise.
        """
        credential = await self.mqtt_repo.get_active_by_username(username)
        if credential is None:
            verify_password(password, DUMMY_PASSWORD_HASH)
            return MqttDecision.IGNORE, None
        if not verify_password(password, credential.hashed_password):
            logger.warning("MQTT authentication denied", mqtt_username=username)
            return MqttDecision.DENY, None
        return MqttDecision.ALLOW, credential

    async def acl(
        self, username: str, topic: str, access: MqttAccess
    ) -> tuple[MqttDecision, bool]:
        """Authorize a publish or subscribe. Returns (decision, is_superuser)."""
        credential = await self.mqtt_repo.get_active_by_username(username)
        if credential is None:
            logger.info("MQTT ACL denied", mqtt_username=username, reason="unknown_user")
            return MqttDecision.DENY, False
        if credential.is_superuser:
            return MqttDecision.ALLOW, True
        if topic_owned_by(topic, username):
            return MqttDecision.ALLOW, False
        logger.info(
            "MQTT ACL denied", mqtt_username=username, topic=topic, access=access.value
        )
        return MqttDecision.DENY, False

    async def list_active(self) -> list[MqttCredential]:
        return await self.mqtt_repo.list_active()

    async def delete(self, username: str) -> None:
        """Soft delete. Absent or already deleted raises NotFoundError."""
        credential = await self.mqtt_repo.get_active_by_username(username)
        if credential is None:
            raise NotFoundError("MQTT User not found")
        now = utc_now()
        credential.deleted_at = now
        credential.updated_at = now
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("MQTT credential deleted", mqtt_username=username)
