"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import UserFactory, TenantFactory, ...
"""

from tests.factories.auth import (
    DEFAULT_MQTT_PASSWORD,
    MqttCredentialFactory,
    RefreshTokenFactory,
    generate_token_hash,
)
from tests.factories.base import BaseFactory, short_id, utc_now
from tests.factories.tenant import TenantFactory
from tests.factories.user import DEFAULT_TEST_PASSWORD, UserDetailsFactory, UserFactory

__all__ = [
    # Base
    "BaseFactory",
    "short_id",
    "utc_now",
    # Tenant
    "TenantFactory",
    # User
    "DEFAULT_TEST_PASSWORD",
    "UserDetailsFactory",
    "UserFactory",
    # Auth
    "DEFAULT_MQTT_PASSWORD",
    "MqttCredentialFactory",
    "RefreshTokenFactory",
    "generate_token_hash",
]
