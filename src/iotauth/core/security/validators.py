"""Field validators shared by request schemas."""

import re
from typing import Final

from zxcvbn import zxcvbn

USERNAME_MIN_LENGTH: Final[int] = 3
USERNAME_MAX_LENGTH: Final[int] = 50
PASSWORD_MIN_LENGTH: Final[int] = 8
PASSWORD_MAX_LENGTH: Final[int] = 128

# MQTT usernames end up inside topic paths (users/<name>/...), so "/", "+", "#"
# and whitespace are excluded by allow-listing.
MQTT_USERNAME_REGEX: Final[str] = r"^[A-Za-z0-9_-]{3,64}$"
_MQTT_USERNAME_PATTERN: Final[re.Pattern[str]] = re.compile(MQTT_USERNAME_REGEX)

# The same rule set the login form enforces client side.
SSO_TOKEN_REGEX: Final[str] = r"^[A-Za-z0-9]{1,128}$"
_SSO_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(SSO_TOKEN_REGEX)


def validate_username(value: str) -> str:
    """Trim and enforce the 3-50 character rule for account usernames."""
    value = value.strip()
    if not USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH:
        raise ValueError(
            f"Username must be between {USERNAME_MIN_LENGTH} and "
            f"{USERNAME_MAX_LENGTH} characters"
        )
    return value


def validate_mqtt_username(value: str) -> str:
    """Allow only letters, digits, underscore and hyphen (3-64 characters)."""
    if not _MQTT_USERNAME_PATTERN.fullmatch(value):
        raise ValueError(
            "Username may only contain letters, numbers, underscores and hyphens "
            "(3-64 characters)"
        )
    return value


def validate_password_strength(value: str, min_score: int) -> str:
    """Validate password strength using zxcvbn entropy estimation."""
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if len(value) > PASSWORD_MAX_LENGTH:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_LENGTH} characters")

    # zxcvbn cost grows with input length; the cap above bounds it
    result = zxcvbn(value)
    if result["score"] < min_score:
        feedback = result.get("feedback", {})
        warning = feedback.get("warning", "")
        suggestions = feedback.get("suggestions", [])
        if warning:
            raise ValueError(f"Weak password: {warning}")
        if suggestions:
            raise ValueError(f"Weak password: {suggestions[0]}")
        raise ValueError("Password is too weak. Use a longer password with a mix of characters.")
    return value


def is_valid_sso_token(value: str) -> bool:
    """State and nonce values: alphanumeric, at most 128 characters."""
    return bool(_SSO_TOKEN_PATTERN.fullmatch(value))
