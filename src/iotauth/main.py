from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from src.iotauth.api.middlewares import setup_middlewares
from src.iotauth.api.v1.router import api_router
from src.iotauth.core.config import get_settings
from src.iotauth.core.db import dispose_engine
from src.iotauth.core.exceptions import error_body, setup_exception_handlers
from src.iotauth.core.health import setup_health_endpoint, setup_metrics
from src.iotauth.core.logging import get_logger, setup_logging
from src.iotauth.core.rate_limit import limiter
from src.iotauth.core.redis import close_redis
from src.iotauth.core.shutdown import request_tracker
from src.iotauth.temporal.client import close_temporal_client

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info("Starting application", app_name=settings.app_name, env=settings.app_env)

    yield

    grace_period = settings.shutdown_grace_period
    logger.info("Shutdown initiated", in_flight=request_tracker.in_flight_count)
    await request_tracker.start_shutdown()
    drained = await request_tracker.wait_for_drain(timeout=grace_period)
    if not drained:
        logger.warning(
            "Shutdown grace period elapsed",
            grace_period=grace_period,
            in_flight=request_tracker.in_flight_count,
        )

    logger.info("Closing connections")
    await close_redis()
    await close_temporal_client()
    await dispose_engine()
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "auth", "description": "Login, registration and refresh-token sessions"},
    {"name": "users", "description": "Self-service account and profile details"},
    {"name": "tenants", "description": "Tenant registry"},
    {"name": "mqtt", "description": "MQTT broker credentials and auth/ACL hooks"},
]


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Per-IP slowapi limit, rendered in the same envelope as every other error."""
    return JSONResponse(status_code=429, content=error_body("Too many requests"))


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Authentication core for a multi-tenant IoT platform",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_openapi else None,
        redoc_url="/redoc" if settings.enable_openapi else None,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
    )

    setup_exception_handlers(app)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

    setup_middlewares(app, settings)

    app.include_router(api_router)

    setup_metrics(app)
    setup_health_endpoint(app)

    return app


app = create_app()
