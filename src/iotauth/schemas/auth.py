from typing import Any
from uuid import UUID

from pydantic import BaseModel, EmailStr, field_validator

from src.iotauth.core.config import get_settings
from src.iotauth.core.security.validators import validate_password_strength, validate_username
from src.iotauth.models.enums import UserRole
from src.iotauth.schemas.user import UserRead


class LoginRequest(BaseModel):
    """Login payload.

    Credential fields are optional at the schema level so that a missing field is
    reported as a bad request by the login flow itself, and a malformed email is
    just an unknown identity (401), never a validation error.
    """

    email_or_username: str | None = None
    password: str | None = None
    tenant_id: UUID | None = None
    redirect_uri: str | None = None
    state: str | None = None
    nonce: str | None = None


class TokenData(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class LoginData(TokenData):
    user: UserRead
    redirect_url: str | None = None


class RegisterRequest(BaseModel):
    username: str
    email: EmailStr
    password: str
    tenant_id: UUID
    role: UserRole = UserRole.USER

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        return validate_username(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        # Login trims the password it is given
        return validate_password_strength(v.strip(), get_settings().min_password_score)


class RegisterData(TokenData):
    id: UUID


class VerifyData(BaseModel):
    user: UserRead
    claims: dict[str, Any]
