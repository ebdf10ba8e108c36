"""
Temporal worker - separate process from the API.

Run with:
    python -m src.iotauth.temporal.worker              # poll the jobs queue
    python -m src.iotauth.temporal.worker --schedule   # also register the cleanup cron
"""

import argparse
import asyncio

import uvicorn
from fastapi import FastAPI
from temporalio.client import Client
from temporalio.exceptions import WorkflowAlreadyStartedError
from temporalio.worker import Worker

from src.iotauth.core.config import get_settings
from src.iotauth.core.db import dispose_engine
from src.iotauth.core.logging import get_logger, setup_logging
from src.iotauth.temporal.activities import cleanup_refresh_tokens
from src.iotauth.temporal.workflows import SessionCleanupWorkflow

logger = get_logger(__name__)

WORKER_HEALTH_PORT = 8001
CLEANUP_WORKFLOW_ID = "session-cleanup"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Temporal worker")
    parser.add_argument(
        "--schedule",
        action="store_true",
        help="Register the session cleanup cron workflow (needs CLEANUP_SCHEDULE)",
    )
    return parser.parse_args()


def create_worker(client: Client, task_queue: str) -> Worker:
    return Worker(
        client,
        task_queue=task_queue,
        workflows=[SessionCleanupWorkflow],
        activities=[cleanup_refresh_tokens],
        max_concurrent_activities=10,
        max_concurrent_workflow_tasks=10,
    )


async def schedule_cleanup(client: Client) -> None:
    """Start the cron workflow once; an already running schedule is left alone."""
    settings = get_settings()
    if not settings.cleanup_schedule:
        logger.warning("CLEANUP_SCHEDULE not set, session cleanup not scheduled")
        return
    try:
        await client.start_workflow(
            SessionCleanupWorkflow.run,
            settings.cleanup_retention_days,
            id=CLEANUP_WORKFLOW_ID,
            task_queue=settings.temporal_task_queue,
            cron_schedule=settings.cleanup_schedule,
        )
        logger.info("Session cleanup scheduled", cron=settings.cleanup_schedule)
    except WorkflowAlreadyStartedError:
        logger.info("Session cleanup already scheduled", workflow_id=CLEANUP_WORKFLOW_ID)


async def run_health_server(task_queue: str, port: int = WORKER_HEALTH_PORT) -> None:
    """Lightweight health server for container probes."""
    health_app = FastAPI(title="Temporal Worker Health")

    @health_app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy", "service": "temporal-worker", "task_queue": task_queue}

    config = uvicorn.Config(health_app, host="0.0.0.0", port=port, log_level="warning")
    server = uvicorn.Server(config)
    logger.info("Starting worker health server", port=port)
    await server.serve()


async def main() -> None:
    args = parse_args()
    settings = get_settings()
    setup_logging(settings.debug)

    client = await Client.connect(
        settings.temporal_host,
        namespace=settings.temporal_namespace,
    )

    if args.schedule:
        await schedule_cleanup(client)

    worker = create_worker(client, settings.temporal_task_queue)
    logger.info("Starting worker", task_queue=settings.temporal_task_queue)
    try:
        await asyncio.gather(
            worker.run(),
            run_health_server(settings.temporal_task_queue),
        )
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
