"""MQTT broker endpoints: credential management and the broker's HTTP auth hooks.

Service-to-service surface guarded by the general API key; no user session.
"""

from collections.abc import Callable, Coroutine
from typing import Any

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from src.iotauth.api.dependencies import MqttServiceDep, require_api_key
from src.iotauth.api.responses import respond
from src.iotauth.core.exceptions import VALIDATION_MESSAGE, error_body, validation_details
from src.iotauth.models.enums import MqttDecision
from src.iotauth.schemas import (
    Envelope,
    MqttAclRequest,
    MqttCheckData,
    MqttCheckRequest,
    MqttCreateRequest,
    MqttCredentialListItem,
    MqttCredentialRead,
    MqttList,
)


class BrokerHookRoute(APIRoute):
    """Route class for broker hooks.

    The broker expects a decision on every reply, so a malformed hook request is
    answered with 422 and ``result: ignore`` instead of the generic 400/422 split.
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_route_handler = super().get_route_handler()

        async def hook_route_handler(request: Request) -> Response:
            try:
                return await original_route_handler(request)
            except RequestValidationError as exc:
                return JSONResponse(
                    status_code=422,
                    content=error_body(
                        VALIDATION_MESSAGE,
                        details=validation_details(exc),
                        result=MqttDecision.IGNORE.value,
                    ),
                )

        return hook_route_handler


router = APIRouter(prefix="/mqtt", tags=["mqtt"], dependencies=[Depends(require_api_key)])
hooks_router = APIRouter(
    prefix="/mqtt",
    tags=["mqtt"],
    dependencies=[Depends(require_api_key)],
    route_class=BrokerHookRoute,
)

_DECISION_MESSAGES = {
    MqttDecision.ALLOW: "Authentication successful",
    MqttDecision.DENY: "Invalid information",
    MqttDecision.IGNORE: "User not found",
}


@router.post(
    "/create",
    response_model=Envelope[MqttCredentialRead],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Username already exists (deleted ones included)"}},
)
async def create_credential(data: MqttCreateRequest, service: MqttServiceDep) -> JSONResponse:
    credential = await service.create(data)
    return respond(
        "MQTT User created successfully",
        MqttCredentialRead.model_validate(credential),
        status_code=status.HTTP_201_CREATED,
    )


@hooks_router.post("/check", response_model=Envelope[MqttCheckData])
async def check_credential(data: MqttCheckRequest, service: MqttServiceDep) -> JSONResponse:
    """Broker CONNECT hook. Always 200; the answer is in ``result``."""
    decision, credential = await service.check(data.username, data.password)
    payload = MqttCheckData(is_superuser=credential.is_superuser) if credential else None
    return respond(_DECISION_MESSAGES[decision], payload, result=decision.value)


@hooks_router.post("/acl", response_model=Envelope[None])
async def check_acl(data: MqttAclRequest, service: MqttServiceDep) -> JSONResponse:
    """Broker PUBLISH/SUBSCRIBE hook. Deny is a decision, not an error."""
    decision, is_superuser = await service.acl(data.username, data.topic, data.access)
    if decision is MqttDecision.ALLOW:
        message = "Superuser authorized" if is_superuser else "Authorization successful"
    else:
        message = "Permission denied"
    return respond(message, result=decision.value)


@router.get("", response_model=Envelope[MqttList])
async def list_credentials(service: MqttServiceDep) -> JSONResponse:
    credentials = await service.list_active()
    data = MqttList(
        mqtt=[
            MqttCredentialListItem(
                username=c.username, is_superuser=c.is_superuser, is_deleted=c.is_deleted
            )
            for c in credentials
        ]
    )
    return respond("User MQTT list retrieved successfully", data)


@router.delete("/{username}", response_model=Envelope[None])
async def delete_credential(username: str, service: MqttServiceDep) -> JSONResponse:
    await service.delete(username)
    return respond("MQTT User deleted successfully")
