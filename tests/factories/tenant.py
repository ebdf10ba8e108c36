"""Tenant factory for test data generation."""

from uuid import uuid4

from polyfactory import Use

from src.iotauth.models import Tenant
from tests.factories.base import BaseFactory, short_id, utc_now


class TenantFactory(BaseFactory):
    __model__ = Tenant

    id = Use(uuid4)
    name = Use(lambda: f"Tenant {short_id()}")
    description = None
    is_active = True
    created_at = Use(utc_now)
    updated_at = Use(utc_now)
    deleted_at = None

    @classmethod
    def deleted(cls, **kwargs):
        """Create a soft-deleted tenant."""
        return cls.build(deleted_at=utc_now(), **kwargs)
