from src.iotauth.schemas.auth import (
    LoginData,
    LoginRequest,
    RegisterData,
    RegisterRequest,
    TokenData,
    VerifyData,
)
from src.iotauth.schemas.common import Envelope, ErrorEnvelope, FieldError
from src.iotauth.schemas.mqtt import (
    MqttAclRequest,
    MqttCheckData,
    MqttCheckRequest,
    MqttCreateRequest,
    MqttCredentialListItem,
    MqttCredentialRead,
    MqttList,
)
from src.iotauth.schemas.tenant import TenantCreate, TenantRead, TenantUpdate
from src.iotauth.schemas.user import (
    UserDeleted,
    UserDetailsRead,
    UserDetailsUpdate,
    UserRead,
    UserUpdate,
)

__all__ = [
    # Common
    "Envelope",
    "ErrorEnvelope",
    "FieldError",
    # Auth
    "LoginData",
    "LoginRequest",
    "RegisterData",
    "RegisterRequest",
    "TokenData",
    "VerifyData",
    # MQTT
    "MqttAclRequest",
    "MqttCheckData",
    "MqttCheckRequest",
    "MqttCreateRequest",
    "MqttCredentialListItem",
    "MqttCredentialRead",
    "MqttList",
    # Tenant
    "TenantCreate",
    "TenantRead",
    "TenantUpdate",
    # User
    "UserDeleted",
    "UserDetailsRead",
    "UserDetailsUpdate",
    "UserRead",
    "UserUpdate",
]
