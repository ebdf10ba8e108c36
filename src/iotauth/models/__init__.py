"""Model exports.

Import from here: `from src.iotauth.models import User, Tenant`
"""

from src.iotauth.models.auth import RefreshToken
from src.iotauth.models.enums import MqttAccess, MqttDecision, UserRole
from src.iotauth.models.mqtt import MqttCredential
from src.iotauth.models.tenant import Tenant
from src.iotauth.models.user import User, UserDetails

__all__ = [
    # Enums
    "MqttAccess",
    "MqttDecision",
    "UserRole",
    # Tables
    "MqttCredential",
    "RefreshToken",
    "Tenant",
    "User",
    "UserDetails",
]
