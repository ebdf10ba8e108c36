"""Test helper functions for common data creation patterns."""

from typing import Any
from uuid import UUID

from httpx import AsyncClient, Response
from sqlmodel import SQLModel

from src.iotauth.core.config import get_settings
from src.iotauth.core.db import get_session
from src.iotauth.core.security import create_access_token
from src.iotauth.models import Tenant, User
from tests.factories import DEFAULT_TEST_PASSWORD, TenantFactory, UserFactory


def api_key_headers() -> dict[str, str]:
    return {"X-API-Key": get_settings().api_key}


def tenant_secret_headers() -> dict[str, str]:
    return {"X-Tenant-Secret-Key": get_settings().tenant_secret_key}


def bearer_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id, user.tenant_id, user.role)
    return {"Authorization": f"Bearer {token}"}


def api_path(path: str) -> str:
    return f"{get_settings().api_prefix}{path}"


async def seed(*entities: SQLModel) -> None:
    """Persist entities in their own committed session.

    The app under test shares the in-memory database, so data must be committed
    before a request can see it.
    """
    async with get_session() as session:
        for entity in entities:
            session.add(entity)
            await session.flush()
        await session.commit()


async def fetch[ModelT: SQLModel](model: type[ModelT], id: UUID) -> ModelT | None:
    """Read a row back in a fresh session, bypassing any cached state."""
    async with get_session() as session:
        return await session.get(model, id)


async def create_tenant_with_user(**user_kwargs: Any) -> tuple[Tenant, User]:
    tenant = TenantFactory.build()
    user = UserFactory.build(tenant_id=tenant.id, **user_kwargs)
    await seed(tenant, user)
    return tenant, user


async def login(
    client: AsyncClient,
    identifier: str,
    password: str = DEFAULT_TEST_PASSWORD,
    **extra: Any,
) -> Response:
    return await client.post(
        api_path("/auth/login"),
        json={"email_or_username": identifier, "password": password, **extra},
        headers=api_key_headers(),
    )
