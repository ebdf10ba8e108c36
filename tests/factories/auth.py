"""Session and MQTT credential factories."""

import secrets
from datetime import timedelta
from hashlib import sha256
from uuid import uuid4

from polyfactory import Use

from src.iotauth.core.security import hash_password
from src.iotauth.models import MqttCredential, RefreshToken
from tests.factories.base import BaseFactory, short_id, utc_now

DEFAULT_MQTT_PASSWORD = "Kd8$wQ3!zNr5tY"

_DEFAULT_MQTT_HASH = hash_password(DEFAULT_MQTT_PASSWORD)


def generate_token_hash() -> str:
    return sha256(secrets.token_urlsafe(32).encode()).hexdigest()


class RefreshTokenFactory(BaseFactory):
    __model__ = RefreshToken

    id = Use(uuid4)
    user_id = None
    tenant_id = None
    token_hash = Use(generate_token_hash)
    expires_at = Use(lambda: utc_now() + timedelta(days=7))
    created_at = Use(utc_now)
    revoked = False

    @classmethod
    def expired(cls, days_ago: int = 1, **kwargs):
        return cls.build(expires_at=utc_now() - timedelta(days=days_ago), **kwargs)


class MqttCredentialFactory(BaseFactory):
    __model__ = MqttCredential

    id = Use(uuid4)
    username = Use(lambda: f"device_{short_id()}")
    hashed_password = _DEFAULT_MQTT_HASH
    is_superuser = False
    created_at = Use(utc_now)
    updated_at = Use(utc_now)
    deleted_at = None

    @classmethod
    def superuser(cls, **kwargs):
        return cls.build(is_superuser=True, **kwargs)

    @classmethod
    def deleted(cls, **kwargs):
        return cls.build(deleted_at=utc_now(), **kwargs)
