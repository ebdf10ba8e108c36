"""FastAPI dependency injection definitions."""

from src.iotauth.api.dependencies.auth import (
    AdminUser,
    CurrentUser,
    TenantCreator,
    bearer_scheme,
    get_current_user,
    get_tenant_creator,
    require_admin_role,
    require_api_key,
    require_tenant_secret,
)
from src.iotauth.api.dependencies.db import DBSession, get_db_session
from src.iotauth.api.dependencies.repositories import (
    MqttRepo,
    TenantRepo,
    TokenRepo,
    UserDetailsRepo,
    UserRepo,
)
from src.iotauth.api.dependencies.services import (
    AuthServiceDep,
    MqttServiceDep,
    RegistrationServiceDep,
    TenantServiceDep,
    TokenServiceDep,
    UserServiceDep,
)

__all__ = [
    # Database
    "DBSession",
    "get_db_session",
    # Auth
    "AdminUser",
    "CurrentUser",
    "TenantCreator",
    "bearer_scheme",
    "get_current_user",
    "get_tenant_creator",
    "require_admin_role",
    "require_api_key",
    "require_tenant_secret",
    # Repositories
    "MqttRepo",
    "TenantRepo",
    "TokenRepo",
    "UserDetailsRepo",
    "UserRepo",
    # Services
    "AuthServiceDep",
    "MqttServiceDep",
    "RegistrationServiceDep",
    "TenantServiceDep",
    "TokenServiceDep",
    "UserServiceDep",
]
