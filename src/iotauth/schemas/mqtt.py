from pydantic import BaseModel, StrictBool, field_validator

from src.iotauth.core.config import get_settings
from src.iotauth.core.security.validators import (
    validate_mqtt_username,
    validate_password_strength,
)
from src.iotauth.models.enums import MqttAccess


class MqttCreateRequest(BaseModel):
    username: str
    password: str
    is_superuser: StrictBool = False

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        return validate_mqtt_username(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v, get_settings().min_password_score)


class MqttCheckRequest(BaseModel):
    """Broker authentication hook (client CONNECT)."""

    username: str
    password: str


class MqttAclRequest(BaseModel):
    """Broker authorization hook (PUBLISH / SUBSCRIBE)."""

    username: str
    topic: str
    access: MqttAccess


class MqttCredentialRead(BaseModel):
    username: str
    is_superuser: bool

    model_config = {"from_attributes": True}


class MqttCredentialListItem(MqttCredentialRead):
    is_deleted: bool


class MqttCheckData(BaseModel):
    is_superuser: bool


class MqttList(BaseModel):
    mqtt: list[MqttCredentialListItem]
