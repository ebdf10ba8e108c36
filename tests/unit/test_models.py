"""Table model column mapping."""

import pytest
from sqlalchemy import DateTime

from src.iotauth.models import MqttCredential, RefreshToken, Tenant, User, UserDetails
from src.iotauth.models.base import utc_now

pytestmark = pytest.mark.unit

TIMESTAMP_COLUMNS = {"created_at", "updated_at", "deleted_at", "expires_at"}


@pytest.mark.parametrize("model", [Tenant, User, UserDetails, RefreshToken, MqttCredential])
def test_timestamps_map_to_naive_columns(model: type) -> None:
    columns = [c for c in model.__table__.columns if c.name in TIMESTAMP_COLUMNS]

    assert columns
    for column in columns:
        assert type(column.type) is DateTime, column.name
        assert column.type.timezone is False, column.name


def test_naive_utc_now_passes_validation() -> None:
    tenant = Tenant.model_validate({"name": "Acme", "created_at": utc_now()})

    assert tenant.created_at.tzinfo is None
