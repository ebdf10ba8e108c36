"""Tenant registry endpoints."""

from uuid import UUID

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from src.iotauth.api.dependencies import CurrentUser, TenantCreator, TenantServiceDep
from src.iotauth.api.responses import respond
from src.iotauth.core.logging import get_logger
from src.iotauth.schemas import Envelope, TenantCreate, TenantRead, TenantUpdate

router = APIRouter(prefix="/tenants", tags=["tenants"])
logger = get_logger(__name__)


@router.post(
    "",
    response_model=Envelope[TenantRead],
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"description": "A live tenant with this name already exists"},
        401: {"description": "Missing or invalid tenant secret or bearer token"},
    },
)
async def create_tenant(
    tenant_in: TenantCreate, creator: TenantCreator, service: TenantServiceDep
) -> JSONResponse:
    """Create a tenant, or return the live one with the same name.

    Authenticated by ``X-Tenant-Secret-Key`` (bootstrap) or a bearer token.
    """
    tenant, created = await service.create_or_get(tenant_in)
    if not created:
        return respond("Tenant already exists", TenantRead.model_validate(tenant))
    logger.info(
        "Tenant created via API",
        tenant_id=str(tenant.id),
        bootstrap=creator is None,
    )
    return respond(
        "Tenant created successfully",
        TenantRead.model_validate(tenant),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("", response_model=Envelope[list[TenantRead]])
async def list_tenants(current_user: CurrentUser, service: TenantServiceDep) -> JSONResponse:
    tenants = await service.list_active()
    return respond(
        "Tenants retrieved successfully",
        [TenantRead.model_validate(t) for t in tenants],
    )


@router.get("/{tenant_id}", response_model=Envelope[TenantRead])
async def get_tenant(
    tenant_id: UUID, current_user: CurrentUser, service: TenantServiceDep
) -> JSONResponse:
    tenant = await service.get(tenant_id)
    return respond("Tenant retrieved successfully", TenantRead.model_validate(tenant))


@router.put("/{tenant_id}", response_model=Envelope[TenantRead])
async def update_tenant(
    tenant_id: UUID,
    tenant_in: TenantUpdate,
    current_user: CurrentUser,
    service: TenantServiceDep,
) -> JSONResponse:
    tenant = await service.update(tenant_id, tenant_in)
    return respond("Tenant updated successfully", TenantRead.model_validate(tenant))


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tenant(
    tenant_id: UUID, current_user: CurrentUser, service: TenantServiceDep
) -> Response:
    """Soft delete. Users of the tenant keep their tenant_id."""
    await service.soft_delete(tenant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
