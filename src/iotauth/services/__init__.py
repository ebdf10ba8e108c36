from src.iotauth.services.auth_service import AuthService, LoginResult
from src.iotauth.services.mqtt_service import MqttService
from src.iotauth.services.registration_service import RegistrationService
from src.iotauth.services.tenant_service import TenantService
from src.iotauth.services.token_service import TokenService
from src.iotauth.services.user_service import UserService

__all__ = [
    "AuthService",
    "LoginResult",
    "MqttService",
    "RegistrationService",
    "TenantService",
    "TokenService",
    "UserService",
]
