"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.iotauth.api.dependencies.db import DBSession
from src.iotauth.api.dependencies.repositories import (
    MqttRepo,
    TenantRepo,
    TokenRepo,
    UserDetailsRepo,
    UserRepo,
)
from src.iotauth.services import (
    AuthService,
    MqttService,
    RegistrationService,
    TenantService,
    TokenService,
    UserService,
)


def get_token_service(
    token_repo: TokenRepo, user_repo: UserRepo, session: DBSession
) -> TokenService:
    return TokenService(token_repo, user_repo, session)


TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]


def get_auth_service(
    user_repo: UserRepo, token_service: TokenServiceDep, session: DBSession
) -> AuthService:
    return AuthService(user_repo, token_service, session)


def get_registration_service(
    user_repo: UserRepo,
    details_repo: UserDetailsRepo,
    tenant_repo: TenantRepo,
    token_service: TokenServiceDep,
    session: DBSession,
) -> RegistrationService:
    return RegistrationService(user_repo, details_repo, tenant_repo, token_service, session)


def get_tenant_service(tenant_repo: TenantRepo, session: DBSession) -> TenantService:
    return TenantService(tenant_repo, session)


def get_user_service(
    user_repo: UserRepo,
    details_repo: UserDetailsRepo,
    token_service: TokenServiceDep,
    session: DBSession,
) -> UserService:
    return UserService(user_repo, details_repo, token_service, session)


def get_mqtt_service(mqtt_repo: MqttRepo, session: DBSession) -> MqttService:
    return MqttService(mqtt_repo, session)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
RegistrationServiceDep = Annotated[RegistrationService, Depends(get_registration_service)]
TenantServiceDep = Annotated[TenantService, Depends(get_tenant_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
MqttServiceDep = Annotated[MqttService, Depends(get_mqtt_service)]
