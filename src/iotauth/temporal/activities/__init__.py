"""Temporal activities. Each one is idempotent and safe to retry."""

from src.iotauth.temporal.activities.cleanup import cleanup_refresh_tokens

__all__ = ["cleanup_refresh_tokens"]
