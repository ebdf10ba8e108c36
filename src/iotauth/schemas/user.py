from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.iotauth.core.config import get_settings
from src.iotauth.core.security.validators import validate_password_strength, validate_username


class UserRead(BaseModel):
    id: UUID
    tenant_id: UUID
    username: str
    email: EmailStr
    role: str
    is_banned: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    """Partial update of the caller's own account."""

    username: str | None = None
    email: EmailStr | None = None
    password: str | None = None

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str | None) -> str | None:
        return validate_username(v) if v is not None else None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return v.lower() if v is not None else None

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return validate_password_strength(v.strip(), get_settings().min_password_score)


class UserDeleted(BaseModel):
    id: UUID


class UserDetailsRead(BaseModel):
    user_id: UUID
    full_name: str | None = None
    phone_number: str | None = None
    address: str | None = None
    date_of_birth: date | None = None
    profile_picture: str | None = None
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserDetailsUpdate(BaseModel):
    """Partial update. Omitted fields are left alone; explicit nulls clear them."""

    full_name: str | None = Field(default=None, max_length=255)
    phone_number: str | None = Field(default=None, max_length=32, pattern=r"^\+?[0-9 ()-]{3,32}$")
    address: str | None = Field(default=None, max_length=500)
    date_of_birth: date | None = None

    @field_validator("date_of_birth")
    @classmethod
    def not_in_future(cls, v: date | None) -> date | None:
        if v is not None and v > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return v
