"""Health and metrics endpoints."""

import secrets
import time
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text

from src.iotauth.core.config import get_settings
from src.iotauth.core.db import get_session
from src.iotauth.core.exceptions import AuthenticationError
from src.iotauth.core.redis import redis_status
from src.iotauth.core.shutdown import request_tracker

_health_cache: dict[str, Any] | None = None
_health_cache_time: float = 0
HEALTH_CACHE_TTL = 10  # seconds


def reset_health_cache() -> None:
    """Reset health cache (for testing)."""
    global _health_cache, _health_cache_time
    _health_cache = None
    _health_cache_time = 0


async def _check_health() -> dict[str, Any]:
    health_status: dict[str, Any] = {
        "status": "healthy",
        "database": "unknown",
        "redis": "unknown",
        "cached": False,
        "timestamp": time.time(),
    }

    try:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))
        health_status["database"] = "healthy"
    except Exception as e:
        health_status["database"] = f"unhealthy: {e!s}"
        health_status["status"] = "unhealthy"

    # Redis is optional: losing it degrades the limiter and blacklist, nothing more
    health_status["redis"] = await redis_status()
    redis_ok = health_status["redis"] in ("healthy", "not_configured")
    if not redis_ok and health_status["status"] == "healthy":
        health_status["status"] = "degraded"

    return health_status


def setup_health_endpoint(app: FastAPI) -> None:
    """Configure the cached /health endpoint."""

    @app.get("/health", include_in_schema=False)
    async def health() -> JSONResponse:
        global _health_cache, _health_cache_time

        if request_tracker.is_shutting_down:
            return JSONResponse(
                content={
                    "status": "draining",
                    "in_flight_requests": request_tracker.in_flight_count,
                },
                status_code=503,
            )

        now = time.time()
        if _health_cache and (now - _health_cache_time) < HEALTH_CACHE_TTL:
            cached = {**_health_cache, "cached": True}
            cached["cache_age_seconds"] = round(now - _health_cache_time, 1)
            return JSONResponse(
                content=cached, status_code=200 if cached["status"] == "healthy" else 503
            )

        health_status = await _check_health()
        _health_cache = health_status
        _health_cache_time = now
        status_code = 200 if health_status["status"] == "healthy" else 503
        return JSONResponse(content=health_status, status_code=status_code)


def setup_metrics(app: FastAPI) -> None:
    """Expose Prometheus metrics, key-protected when METRICS_API_KEY is set."""
    settings = get_settings()
    instrumentator = Instrumentator(excluded_handlers=["/health", "/metrics"]).instrument(app)

    if settings.metrics_api_key:
        metrics_key_header = APIKeyHeader(name="X-Metrics-Key", auto_error=False)

        async def verify_metrics_key(
            api_key: str | None = Depends(metrics_key_header),
        ) -> None:
            expected = settings.metrics_api_key or ""
            if api_key is None or not secrets.compare_digest(api_key, expected):
                raise AuthenticationError()

        instrumentator.expose(
            app,
            endpoint="/metrics",
            include_in_schema=False,
            dependencies=[Depends(verify_metrics_key)],
        )
    else:
        instrumentator.expose(app, endpoint="/metrics", include_in_schema=False)
