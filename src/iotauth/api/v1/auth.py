"""Authentication endpoints: login, registration and the refresh-token session."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Security, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials

from src.iotauth.api.dependencies import (
    AuthServiceDep,
    CurrentUser,
    RegistrationServiceDep,
    TokenServiceDep,
    bearer_scheme,
    require_api_key,
)
from src.iotauth.api.responses import respond
from src.iotauth.core.config import get_settings
from src.iotauth.core.rate_limit import limiter
from src.iotauth.schemas import (
    Envelope,
    LoginData,
    LoginRequest,
    RegisterData,
    RegisterRequest,
    TokenData,
    UserRead,
    VerifyData,
)

router = APIRouter(prefix="/auth", tags=["auth"])


def _access_token_ttl() -> int:
    return get_settings().access_token_expire_minutes * 60


def _set_refresh_cookie(response: JSONResponse, refresh_token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=refresh_token,
        max_age=settings.refresh_token_expire_days * 86400,
        path="/",
        httponly=True,
        secure=settings.refresh_cookie_secure,
        samesite="strict",
    )


def _clear_refresh_cookie(response: JSONResponse) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        path="/",
        httponly=True,
        secure=settings.refresh_cookie_secure,
        samesite="strict",
    )


@router.post(
    "/login",
    response_model=Envelope[LoginData],
    dependencies=[Depends(require_api_key)],
    responses={
        400: {"description": "Missing email_or_username or password"},
        401: {"description": "Invalid API key or credentials"},
        403: {"description": "Redirect origin not allowed"},
        422: {"description": "Malformed SSO parameters"},
        429: {"description": "Too many failed attempts for this identity"},
    },
)
async def login(login_data: LoginRequest, service: AuthServiceDep) -> JSONResponse:
    """Authenticate with email or username and password.

    The access token is returned in the body; the refresh token only as an
    HTTP-only cookie. With a valid ``redirect_uri`` the body also carries
    ``redirect_url`` with the token in its fragment.
    """
    result = await service.login(login_data)
    data = LoginData(
        access_token=result.access_token,
        expires_in=_access_token_ttl(),
        user=UserRead.model_validate(result.user),
        redirect_url=result.redirect_url,
    )
    response = respond("Login successful", data.model_dump(exclude_none=True))
    _set_refresh_cookie(response, result.refresh_token)
    return response


@router.post(
    "/register",
    response_model=Envelope[RegisterData],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_api_key)],
    responses={
        404: {"description": "Tenant not found"},
        409: {"description": "Username or email already registered in the tenant"},
    },
)
@limiter.limit("10/minute")
async def register(
    request: Request, register_data: RegisterRequest, service: RegistrationServiceDep
) -> JSONResponse:
    user, access_token, refresh_token = await service.register(register_data)
    data = RegisterData(id=user.id, access_token=access_token, expires_in=_access_token_ttl())
    response = respond("User registered successfully", data, status_code=status.HTTP_201_CREATED)
    _set_refresh_cookie(response, refresh_token)
    return response


@router.post("/refresh", response_model=Envelope[TokenData])
@limiter.limit("30/minute")
async def refresh(request: Request, service: TokenServiceDep) -> JSONResponse:
    """Rotate the refresh cookie and mint a new access token.

    The presented refresh token is revoked; replaying it fails with 401.
    """
    presented = request.cookies.get(get_settings().refresh_cookie_name)
    _, access_token, refresh_token = await service.refresh(presented)
    data = TokenData(access_token=access_token, expires_in=_access_token_ttl())
    response = respond("Token refreshed successfully", data)
    _set_refresh_cookie(response, refresh_token)
    return response


@router.post("/logout", response_model=Envelope[None])
async def logout(request: Request, service: TokenServiceDep) -> JSONResponse:
    """Revoke the refresh cookie (if any) and clear it. Always succeeds."""
    await service.revoke(request.cookies.get(get_settings().refresh_cookie_name))
    response = respond("Logout successful")
    _clear_refresh_cookie(response)
    return response


@router.get("/verify", response_model=Envelope[VerifyData])
async def verify(
    current_user: CurrentUser,
    service: TokenServiceDep,
    credentials: Annotated[HTTPAuthorizationCredentials, Security(bearer_scheme)],
) -> JSONResponse:
    """Check a bearer access token and return its user and claims."""
    claims = service.verify(credentials.credentials)
    data = VerifyData(user=UserRead.model_validate(current_user), claims=claims)
    return respond("Token is valid", data)
