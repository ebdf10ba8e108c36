"""Repository layer - data access abstraction."""

from src.iotauth.repositories.base import BaseRepository
from src.iotauth.repositories.mqtt import MqttCredentialRepository
from src.iotauth.repositories.tenant import TenantRepository
from src.iotauth.repositories.token import RefreshTokenRepository
from src.iotauth.repositories.user import UserDetailsRepository, UserRepository

__all__ = [
    "BaseRepository",
    "MqttCredentialRepository",
    "RefreshTokenRepository",
    "TenantRepository",
    "UserDetailsRepository",
    "UserRepository",
]
