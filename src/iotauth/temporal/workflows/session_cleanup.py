"""Session cleanup workflow, intended to run on a Temporal cron schedule."""

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from src.iotauth.temporal.activities import cleanup_refresh_tokens


@workflow.defn
class SessionCleanupWorkflow:
    """Sweep refresh tokens that can never be used again.

    Safe to run any number of times; see cleanup_refresh_tokens.
    """

    @workflow.run
    async def run(self, retention_days: int = 30) -> dict[str, int]:
        workflow.logger.info("Starting session cleanup (retention: %d days)", retention_days)

        deleted = await workflow.execute_activity(
            cleanup_refresh_tokens,
            retention_days,
            start_to_close_timeout=timedelta(minutes=5),
            retry_policy=RetryPolicy(
                maximum_attempts=3,
                initial_interval=timedelta(seconds=2),
            ),
        )

        workflow.logger.info("Session cleanup complete: %d refresh tokens deleted", deleted)
        return {"refresh_tokens": deleted}
