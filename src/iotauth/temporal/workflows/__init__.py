"""Temporal workflows - re-exports for worker registration."""

from src.iotauth.temporal.workflows.session_cleanup import SessionCleanupWorkflow

__all__ = ["SessionCleanupWorkflow"]
