"""Authentication service - password login with lockout and optional SSO redirect."""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from src.iotauth.core.config import get_settings
from src.iotauth.core.exceptions import (
    AuthenticationError,
    BadRequestError,
    ForbiddenError,
    RateLimitError,
    ValidationFailed,
    field_error,
)
from src.iotauth.core.logging import get_logger
from src.iotauth.core.rate_limit import (
    lock_out_if_exhausted,
    login_identity,
    reserve_login_attempt,
    reset_login_failures,
)
from src.iotauth.core.security import (
    DUMMY_PASSWORD_HASH,
    build_redirect_url,
    check_sso_params,
    is_valid_redirect_uri,
    verify_password,
)
from src.iotauth.models import User
from src.iotauth.repositories import UserRepository
from src.iotauth.schemas.auth import LoginRequest
from src.iotauth.services.token_service import TokenService

logger = get_logger(__name__)


@dataclass
class LoginResult:
    user: User
    access_token: str
    refresh_token: str
    redirect_url: str | None = None


class AuthService:
    """Login flow.

    Checks run in a fixed order and each one short-circuits:
    1. Required fields present (400)
    2. SSO parameters well-formed (422) and redirect origin allow-listed (403)
    3. Identity not locked out (429)
    4. Credentials (401)

    No password is verified and no token is minted before the redirect target and
    the lockout state have been checked.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        token_service: TokenService,
        session: AsyncSession,
    ):
        self.user_repo = user_repo
        self.token_service = token_service
        self.session = session

    async def login(self, payload: LoginRequest) -> LoginResult:
        identifier = (payload.email_or_username or "").strip()
        password = (payload.password or "").strip()

        missing = []
        if not identifier:
            missing.append(field_error("email_or_username", "Email or username is required"))
        if not password:
            missing.append(field_error("password", "Password is required"))
        if missing:
            raise BadRequestError(details=missing)

        sso_errors = check_sso_params(payload.redirect_uri, payload.state, payload.nonce)
        if sso_errors:
            raise ValidationFailed(details=sso_errors)
        if not is_valid_redirect_uri(payload.redirect_uri, get_settings().sso_allowed_origins):
            logger.warning("Login rejected: redirect origin not allowed")
            raise ForbiddenError()

        identity = login_identity(identifier, payload.tenant_id)
        attempt = await reserve_login_attempt(identity)
        if attempt.retry_after > 0:
            logger.warning("Login locked out", tenant_id=str(payload.tenant_id or "*"))
            raise RateLimitError(attempt.retry_after)

        user = await self._find_user(identifier, payload)

        # Always verify so a missing account costs the same as a wrong password
        password_hash = user.hashed_password if user else DUMMY_PASSWORD_HASH
        password_valid = verify_password(password, password_hash)

        if user is None or not password_valid or not user.can_authenticate:
            locked_out = await lock_out_if_exhausted(attempt)
            logger.warning(
                "Login failed",
                user_id=str(user.id) if user else None,
                attempt=attempt.count,
                locked_out=locked_out,
            )
            raise AuthenticationError()

        await reset_login_failures(identity)

        try:
            access_token, refresh_token = self.token_service.issue(user)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        redirect_url = None
        if payload.redirect_uri:
            redirect_url = build_redirect_url(payload.redirect_uri, access_token, payload.state)

        logger.info("Login succeeded", user_id=str(user.id), tenant_id=str(user.tenant_id))
        return LoginResult(
            user=user,
            access_token=access_token,
            refresh_token=refresh_token,
            redirect_url=redirect_url,
        )

    async def _find_user(self, identifier: str, payload: LoginRequest) -> User | None:
        matches = await self.user_repo.find_active_by_identifier(identifier, payload.tenant_id)
        # Without a tenant the same username may exist in several tenants
        if len(matches) != 1:
            return None
        return matches[0]
