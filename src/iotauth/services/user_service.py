"""User self-service and profile details."""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.iotauth.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from src.iotauth.core.logging import get_logger
from src.iotauth.core.security import hash_password
from src.iotauth.models import User, UserDetails
from src.iotauth.models.base import utc_now
from src.iotauth.repositories import UserDetailsRepository, UserRepository
from src.iotauth.schemas.user import UserDetailsUpdate, UserUpdate
from src.iotauth.services.token_service import TokenService

logger = get_logger(__name__)


class UserService:
    """Operations a user performs on their own account, plus admin bans."""

    def __init__(
        self,
        user_repo: UserRepository,
        details_repo: UserDetailsRepository,
        token_service: TokenService,
        session: AsyncSession,
    ):
        self.user_repo = user_repo
        self.details_repo = details_repo
        self.token_service = token_service
        self.session = session

    async def list_tenant_users(self, tenant_id: UUID) -> list[User]:
        return await self.user_repo.list_active_by_tenant(tenant_id)

    async def update(self, user: User, data: UserUpdate) -> User:
        """Apply a partial update. Username and email stay unique within the tenant."""
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "username" in changes and await self.user_repo.exists_active_username(
            user.tenant_id, changes["username"], exclude_id=user.id
        ):
            raise ConflictError("Username already taken")
        if "email" in changes and await self.user_repo.exists_active_email(
            user.tenant_id, changes["email"], exclude_id=user.id
        ):
            raise ConflictError("Email already registered")

        if "password" in changes:
            user.hashed_password = hash_password(changes.pop("password"))
        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = utc_now()

        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("User already exists") from e
        return user

    async def soft_delete(self, user: User) -> None:
        """Delete own account: profile goes with it and every session is revoked."""
        now = utc_now()
        try:
            user.deleted_at = now
            user.updated_at = now
            await self.details_repo.soft_delete_for_user(user.id)
            revoked = await self.token_service.revoke_all_for_user(user.id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        await self.token_service.blacklist_pending()
        logger.info("User deleted", user_id=str(user.id), revoked_tokens=revoked)

    async def ban(self, admin: User, user_id: UUID) -> User:
        """Ban a user of the admin's own tenant and end their sessions."""
        target = await self.user_repo.get_active_by_id(user_id)
        # Users of other tenants are reported as missing, not forbidden
        if target is None or target.tenant_id != admin.tenant_id:
            raise NotFoundError("User not found")
        if target.id == admin.id:
            raise ForbiddenError("Cannot ban yourself")

        try:
            target.is_banned = True
            target.updated_at = utc_now()
            await self.token_service.revoke_all_for_user(target.id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        await self.token_service.blacklist_pending()
        logger.warning("User banned", target_user_id=str(target.id), admin_id=str(admin.id))
        return target

    async def get_details(self, user: User) -> UserDetails:
        details = await self.details_repo.get_active_for_user(user.id)
        if details is None:
            raise NotFoundError("User details not found")
        return details

    async def update_details(self, user: User, data: UserDetailsUpdate) -> UserDetails:
        """Partial update. A live user without a profile row gets one created."""
        details = await self.details_repo.get_active_for_user(user.id)
        if details is None:
            details = UserDetails(user_id=user.id)
            self.details_repo.add(details)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(details, field, value)
        details.updated_at = utc_now()

        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return details
