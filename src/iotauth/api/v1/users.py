"""User self-service endpoints."""

from uuid import UUID

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from src.iotauth.api.dependencies import AdminUser, CurrentUser, UserServiceDep
from src.iotauth.api.responses import respond
from src.iotauth.schemas import (
    Envelope,
    UserDeleted,
    UserDetailsRead,
    UserDetailsUpdate,
    UserRead,
    UserUpdate,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=Envelope[UserRead])
async def get_me(current_user: CurrentUser) -> JSONResponse:
    return respond("User retrieved successfully", UserRead.model_validate(current_user))


@router.get("/all", response_model=Envelope[list[UserRead]])
async def list_tenant_users(current_user: CurrentUser, service: UserServiceDep) -> JSONResponse:
    """Live users of the caller's tenant."""
    users = await service.list_tenant_users(current_user.tenant_id)
    return respond("Users retrieved successfully", [UserRead.model_validate(u) for u in users])


@router.put("", response_model=Envelope[UserRead])
async def update_me(
    user_in: UserUpdate, current_user: CurrentUser, service: UserServiceDep
) -> JSONResponse:
    user = await service.update(current_user, user_in)
    return respond("User updated successfully", UserRead.model_validate(user))


@router.delete("", response_model=Envelope[UserDeleted])
async def delete_me(current_user: CurrentUser, service: UserServiceDep) -> JSONResponse:
    """Soft delete the caller's account and end all of its sessions."""
    await service.soft_delete(current_user)
    return respond("User deleted successfully", UserDeleted(id=current_user.id))


@router.get("/details", response_model=Envelope[UserDetailsRead])
async def get_details(current_user: CurrentUser, service: UserServiceDep) -> JSONResponse:
    details = await service.get_details(current_user)
    return respond("User details retrieved successfully", UserDetailsRead.model_validate(details))


@router.put("/details", response_model=Envelope[UserDetailsRead])
async def update_details(
    details_in: UserDetailsUpdate, current_user: CurrentUser, service: UserServiceDep
) -> JSONResponse:
    details = await service.update_details(current_user, details_in)
    return respond("User details updated successfully", UserDetailsRead.model_validate(details))


@router.post("/{user_id}/ban", response_model=Envelope[UserRead])
async def ban_user(user_id: UUID, admin: AdminUser, service: UserServiceDep) -> JSONResponse:
    """Ban a user of the admin's tenant. Their refresh tokens are revoked."""
    user = await service.ban(admin, user_id)
    return respond("User banned successfully", UserRead.model_validate(user))
