"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.iotauth.api.dependencies.db import DBSession
from src.iotauth.repositories import (
    MqttCredentialRepository,
    RefreshTokenRepository,
    TenantRepository,
    UserDetailsRepository,
    UserRepository,
)


def get_user_repository(session: DBSession) -> UserRepository:
    return UserRepository(session)


def get_user_details_repository(session: DBSession) -> UserDetailsRepository:
    return UserDetailsRepository(session)


def get_token_repository(session: DBSession) -> RefreshTokenRepository:
    return RefreshTokenRepository(session)


def get_tenant_repository(session: DBSession) -> TenantRepository:
    return TenantRepository(session)


def get_mqtt_repository(session: DBSession) -> MqttCredentialRepository:
    return MqttCredentialRepository(session)


UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
UserDetailsRepo = Annotated[UserDetailsRepository, Depends(get_user_details_repository)]
TokenRepo = Annotated[RefreshTokenRepository, Depends(get_token_repository)]
TenantRepo = Annotated[TenantRepository, Depends(get_tenant_repository)]
MqttRepo = Annotated[MqttCredentialRepository, Depends(get_mqtt_repository)]
