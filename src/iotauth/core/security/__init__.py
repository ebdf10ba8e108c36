"""Security utilities - crypto, validators and SSO redirect checks.

Re-exports all security-related functions for convenience.
"""

from src.iotauth.core.security.crypto import (
    DUMMY_PASSWORD_HASH,
    TokenType,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    hash_token,
    verify_password,
)
from src.iotauth.core.security.sso import (
    build_redirect_url,
    check_sso_params,
    is_valid_redirect_uri,
    origin_of,
)
from src.iotauth.core.security.validators import (
    validate_mqtt_username,
    validate_password_strength,
    validate_username,
)

__all__ = [
    # Crypto
    "DUMMY_PASSWORD_HASH",
    "TokenType",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "hash_password",
    "hash_token",
    "verify_password",
    # SSO
    "build_redirect_url",
    "check_sso_params",
    "is_valid_redirect_uri",
    "origin_of",
    # Validators
    "validate_mqtt_username",
    "validate_password_strength",
    "validate_username",
]
