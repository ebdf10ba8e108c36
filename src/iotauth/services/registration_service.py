"""Self-registration of tenant users."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.iotauth.core.exceptions import ConflictError, NotFoundError
from src.iotauth.core.logging import get_logger
from src.iotauth.core.security import hash_password
from src.iotauth.models import User, UserDetails
from src.iotauth.repositories import TenantRepository, UserDetailsRepository, UserRepository
from src.iotauth.schemas.auth import RegisterRequest
from src.iotauth.services.token_service import TokenService

logger = get_logger(__name__)


class RegistrationService:
    def __init__(
        self,
        user_repo: UserRepository,
        details_repo: UserDetailsRepository,
        tenant_repo: TenantRepository,
        token_service: TokenService,
        session: AsyncSession,
    ):
        self.user_repo = user_repo
        self.details_repo = details_repo
        self.tenant_repo = tenant_repo
        self.token_service = token_service
        self.session = session

    async def register(self, data: RegisterRequest) -> tuple[User, str, str]:
        """Create a user with an empty profile and log them straight in.

        Returns (user, access token, refresh token).

        Raises:
            NotFoundError: Tenant unknown, deleted or inactive.
            ConflictError: Username or email already used by a live user of the tenant.
        """
        tenant = await self.tenant_repo.get_active_by_id(data.tenant_id)
        if tenant is None or not tenant.is_active:
            raise NotFoundError("Tenant not found")

        if await self.user_repo.exists_active_email(tenant.id, data.email):
            raise ConflictError("Email already registered")
        if await self.user_repo.exists_active_username(tenant.id, data.username):
            raise ConflictError("Username already taken")

        user = User(
            tenant_id=tenant.id,
            username=data.username,
            email=data.email,
            hashed_password=hash_password(data.password),
            role=data.role.value,
        )
        try:
            self.user_repo.add(user)
            # Flush so the user row exists before rows that reference it
            await self.user_repo.flush()
            self.details_repo.add(UserDetails(user_id=user.id))
            access_token, refresh_token = self.token_service.issue(user)
            await self.session.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            await self.session.rollback()
            raise ConflictError("User already exists") from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info("User registered", user_id=str(user.id), tenant_id=str(tenant.id))
        return user, access_token, refresh_token
