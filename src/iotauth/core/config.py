from functools import lru_cache
from urllib.parse import urlparse

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "IoT Auth Core"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True
    api_prefix: str = "/api"

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_ssl_mode: str = "prefer"  # disable, prefer, require, verify-ca, verify-full

    # Shutdown
    shutdown_grace_period: int = 30

    # Service-to-service keys
    api_key: str = ""  # X-API-Key; empty means every keyed route rejects
    tenant_secret_key: str = ""  # X-Tenant-Secret-Key for tenant bootstrap

    # Auth
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    refresh_cookie_name: str = "refresh_token"
    refresh_cookie_secure: bool = False
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 1
    min_password_score: int = 3  # zxcvbn 0-4 scale

    # Login brute-force protection
    login_max_failures: int = 5
    login_failure_window_seconds: int = 900
    login_lockout_seconds: int = 1800

    # SSO
    sso_allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5500",
        "http://127.0.0.1:5500",
    ]

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Metrics
    metrics_api_key: str | None = None  # If set, /metrics requires this key

    # Temporal
    temporal_host: str = "localhost:7233"
    temporal_namespace: str = "default"
    temporal_task_queue: str = "iotauth-jobs"

    # Cleanup (Temporal scheduled workflow)
    cleanup_schedule: str | None = None  # Cron syntax, e.g., "0 3 * * *"
    cleanup_retention_days: int = 30

    # Redis (optional - app works without it)
    redis_url: str | None = None  # e.g., "redis://localhost:6379/0"
    redis_pool_size: int = 10
    redis_retry_seconds: int = 30  # Wait before reconnecting after a failed connect

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "JWT_SECRET_KEY must be changed from default value. "
                "Generate a secure secret with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Reject wildcards - the refresh cookie needs allow_credentials=True."""
        for origin in v:
            if origin == "*":
                raise ValueError(
                    "CORS wildcard '*' is not allowed when allow_credentials=True. "
                    "Specify explicit origins instead."
                )
        return v

    @field_validator("sso_allowed_origins")
    @classmethod
    def validate_sso_origins(cls, v: list[str]) -> list[str]:
        """Each entry must be a bare origin: scheme://host[:port], nothing after it."""
        for origin in v:
            parsed = urlparse(origin)
            if not parsed.scheme or not parsed.hostname:
                raise ValueError(f"SSO origin '{origin}' must include scheme and host")
            if parsed.path not in ("", "/") or parsed.query or parsed.fragment:
                raise ValueError(f"SSO origin '{origin}' must not include a path")
        return [origin.rstrip("/") for origin in v]


@lru_cache
def get_settings() -> Settings:
    return Settings()
