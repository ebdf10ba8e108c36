"""Authentication guards.

Three independent credentials gate different route sets:
- ``X-API-Key``: the general service key (login, registration, MQTT hooks)
- ``X-Tenant-Secret-Key``: tenant bootstrap only
- ``Authorization: Bearer <access token>``: user session routes
Each is its own dependency and routes compose the ones they need.
"""

import secrets
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from src.iotauth.api.dependencies.repositories import UserRepo
from src.iotauth.api.dependencies.services import TokenServiceDep
from src.iotauth.core.config import get_settings
from src.iotauth.core.exceptions import AuthenticationError, ConfigurationError, ForbiddenError
from src.iotauth.core.logging import bind_user_context, get_logger
from src.iotauth.models import User
from src.iotauth.models.enums import UserRole

logger = get_logger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
tenant_secret_header = APIKeyHeader(name="X-Tenant-Secret-Key", auto_error=False)
bearer_scheme = HTTPBearer(auto_error=False)


def _matches(presented: str | None, expected: str) -> bool:
    if not presented or not expected:
        return False
    return secrets.compare_digest(presented.encode(), expected.encode())


async def require_api_key(
    api_key: Annotated[str | None, Security(api_key_header)] = None,
) -> None:
    """Reject the request unless it carries the general API key.

    With no key configured every request is rejected.
    """
    if not _matches(api_key, get_settings().api_key):
        logger.warning("Rejected request with missing or invalid API key")
        raise AuthenticationError()


async def require_tenant_secret(
    secret: Annotated[str | None, Security(tenant_secret_header)] = None,
) -> None:
    expected = get_settings().tenant_secret_key
    if not expected:
        raise ConfigurationError("Tenant secret key is not configured")
    if not _matches(secret, expected):
        logger.warning("Rejected tenant bootstrap with invalid secret")
        raise AuthenticationError()


async def get_current_user(
    token_service: TokenServiceDep,
    user_repo: UserRepo,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)] = None,
) -> User:
    """Validate the bearer access token and load its user.

    The token alone is not enough: a user banned or deleted after the token was
    issued is rejected here.
    """
    payload = token_service.verify(credentials.credentials if credentials else None)
    user = await user_repo.get_by_id(UUID(payload["sub"]))
    if user is None or not user.can_authenticate:
        raise AuthenticationError()
    if str(user.tenant_id) != payload["tenant_id"]:
        raise AuthenticationError()

    bind_user_context(user.id, user.tenant_id, user.role)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def require_admin_role(current_user: CurrentUser) -> User:
    if current_user.role != UserRole.ADMIN.value:
        raise ForbiddenError("Admin role required for this operation")
    return current_user


AdminUser = Annotated[User, Depends(require_admin_role)]


async def get_tenant_creator(
    token_service: TokenServiceDep,
    user_repo: UserRepo,
    secret: Annotated[str | None, Security(tenant_secret_header)] = None,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)] = None,
) -> User | None:
    """Tenant creation accepts the bootstrap secret or a bearer token.

    Returns None for a bootstrap call, the caller otherwise. The secret header takes
    precedence when both are sent.
    """
    if secret is not None:
        await require_tenant_secret(secret)
        return None
    return await get_current_user(token_service, user_repo, credentials)


TenantCreator = Annotated[User | None, Depends(get_tenant_creator)]
