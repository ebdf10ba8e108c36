from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field, StringConstraints

from src.iotauth.models.tenant import TENANT_NAME_MAX_LENGTH

TenantName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=TENANT_NAME_MAX_LENGTH),
]


class TenantCreate(BaseModel):
    name: TenantName
    description: str | None = Field(default=None, max_length=1000)


class TenantUpdate(BaseModel):
    name: TenantName | None = None
    description: str | None = Field(default=None, max_length=1000)
    is_active: bool | None = None


class TenantRead(BaseModel):
    id: UUID
    name: str
    description: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
