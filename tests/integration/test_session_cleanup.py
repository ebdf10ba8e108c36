"""Stale refresh token sweeping."""

from datetime import timedelta

import pytest
from temporalio.testing import ActivityEnvironment

from src.iotauth.models import RefreshToken, Tenant, User
from src.iotauth.temporal.activities import cleanup_refresh_tokens
from tests.factories import RefreshTokenFactory, utc_now
from tests.helpers import fetch, seed

pytestmark = pytest.mark.integration


async def test_sweeps_only_tokens_past_retention(tenant_user: tuple[Tenant, User]) -> None:
    tenant, user = tenant_user
    owner = {"user_id": user.id, "tenant_id": tenant.id}
    live = RefreshTokenFactory.build(**owner)
    recently_expired = RefreshTokenFactory.expired(days_ago=2, **owner)
    long_expired = RefreshTokenFactory.expired(days_ago=45, **owner)
    recently_revoked = RefreshTokenFactory.build(revoked=True, **owner)
    long_revoked = RefreshTokenFactory.build(
        revoked=True, created_at=utc_now() - timedelta(days=40), **owner
    )
    await seed(live, recently_expired, long_expired, recently_revoked, long_revoked)

    deleted = await ActivityEnvironment().run(cleanup_refresh_tokens, 30)

    assert deleted == 2
    assert await fetch(RefreshToken, long_expired.id) is None
    assert await fetch(RefreshToken, long_revoked.id) is None
    for kept in (live, recently_expired, recently_revoked):
        assert await fetch(RefreshToken, kept.id) is not None


async def test_second_run_finds_nothing(tenant_user: tuple[Tenant, User]) -> None:
    tenant, user = tenant_user
    await seed(RefreshTokenFactory.expired(days_ago=60, user_id=user.id, tenant_id=tenant.id))
    env = ActivityEnvironment()

    assert await env.run(cleanup_refresh_tokens, 30) == 1
    assert await env.run(cleanup_refresh_tokens, 30) == 0
