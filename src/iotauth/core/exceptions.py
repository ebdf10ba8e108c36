"""Application errors and the exception handlers that render them.

Every failure leaves the API in the same envelope:
``{"status": false, "message": ..., "details"?: [...], "result"?: ..., "request_id": ...}``.
"""

from collections.abc import Sequence
from typing import Any

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.iotauth.core.logging import get_logger

logger = get_logger(__name__)

VALIDATION_MESSAGE = "Validation error"

# Pydantic error types that mean the payload shape is wrong rather than a value
# failing a rule. These map to 400; everything else maps to 422.
_STRUCTURAL_ERROR_TYPES = frozenset(
    {
        "missing",
        "json_invalid",
        "json_type",
        "model_type",
        "model_attributes_type",
        "dict_type",
        "list_type",
        "string_type",
        "bool_type",
        "int_type",
        "int_parsing",
        "float_type",
        "uuid_type",
        "uuid_parsing",
        "date_type",
        "date_parsing",
        "date_from_datetime_parsing",
        "datetime_type",
        "datetime_parsing",
        "extra_forbidden",
    }
)


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: list[dict[str, str]] | None = None,
        result: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details
        self.result = result
        self.headers = headers
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = 400
    default_message = "Bad Request"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not Found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Conflict"


class ValidationFailed(AppError):
    status_code = 422
    default_message = VALIDATION_MESSAGE


class RateLimitError(AppError):
    status_code = 429
    default_message = "Too many login attempts"

    def __init__(self, retry_after: int, message: str | None = None) -> None:
        self.retry_after = max(retry_after, 1)
        super().__init__(message, headers={"Retry-After": str(self.retry_after)})


class ConfigurationError(AppError):
    """Server-side misconfiguration, e.g. a required secret is not set."""

    status_code = 500
    default_message = "Server misconfigured"


def field_error(field: str, message: str) -> dict[str, str]:
    """Build one entry of a ``details`` array."""
    return {"field": field, "message": message}


def error_body(
    message: str,
    *,
    details: Sequence[dict[str, str]] | None = None,
    result: str | None = None,
) -> dict[str, Any]:
    """Build the failure envelope, omitting empty optional keys."""
    body: dict[str, Any] = {"status": False, "message": message}
    if details is not None:
        body["details"] = list(details)
    if result is not None:
        body["result"] = result
    body["request_id"] = correlation_id.get()
    return body


def validation_details(exc: RequestValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors into ``[{field, message}]``."""
    details = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        message = str(error.get("msg", "Invalid value"))
        # pydantic prefixes custom ValueErrors with "Value error, "
        message = message.removeprefix("Value error, ")
        details.append(field_error(field, message))
    return details


def validation_status(exc: RequestValidationError) -> int:
    """400 when any error is structural (missing or wrong type), otherwise 422."""
    if any(error.get("type") in _STRUCTURAL_ERROR_TYPES for error in exc.errors()):
        return 400
    return 422


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that render the envelope with request_id."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Application error", path=request.url.path, error=exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, details=exc.details, result=exc.result),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=validation_status(exc),
            content=error_body(VALIDATION_MESSAGE, details=validation_details(exc)),
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=correlation_id.get(),
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content=error_body("Internal server error"),
        )
