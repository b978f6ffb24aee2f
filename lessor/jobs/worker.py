"""Hatchet worker entrypoint for scheduled dispatch and health checks.

Usage:
    # CLI command (defined in pyproject.toml)
    lessor-worker

    # Programmatic usage
    from lessor.jobs.worker import run_worker
    await run_worker()
"""

import asyncio
import signal
import sys
from typing import Any

from lessor.api.dependencies import (
    get_agent_store,
    get_dispatcher,
    get_health_monitor,
    reset_dependencies,
)
from lessor.config import get_settings
from lessor.jobs.client import HatchetClient
from lessor.jobs.workflows import health_check, task_dispatch
from lessor.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)

WORKER_NAME = "lessor-worker"


async def create_worker() -> Any:
    """Create a Hatchet worker with both workflows registered.

    Returns:
        Hatchet worker ready to start

    Raises:
        RuntimeError: If Hatchet is disabled or unavailable
    """
    settings = get_settings()
    hatchet_config = settings.jobs.hatchet

    if not hatchet_config.enabled:
        raise RuntimeError("Hatchet is disabled in configuration")

    hatchet = HatchetClient(hatchet_config).get_client()
    if hatchet is None:
        raise RuntimeError("Failed to create Hatchet client - is hatchet-sdk installed?")

    dispatch_workflow = task_dispatch.register_workflow(
        hatchet,
        await get_dispatcher(),
        cron=hatchet_config.cron_dispatch_tasks,
    )
    health_workflow = health_check.register_workflow(
        hatchet,
        await get_health_monitor(),
        await get_agent_store(),
        cron=hatchet_config.cron_check_health,
    )

    worker = hatchet.worker(WORKER_NAME, max_runs=hatchet_config.worker_concurrency)
    for workflow_class in (dispatch_workflow, health_workflow):
        worker.register_workflow(workflow_class())
        logger.info("workflow_registered", registered_class=workflow_class.__name__)

    return worker


async def run_worker() -> None:
    """Create the worker and block until SIGINT/SIGTERM."""
    settings = get_settings()
    setup_logging(settings.observability.logging)

    logger.info(
        "worker_starting",
        server_url=settings.jobs.hatchet.server_url,
        concurrency=settings.jobs.hatchet.worker_concurrency,
    )

    try:
        worker = await create_worker()

        shutdown_event = asyncio.Event()

        def signal_handler(sig: int, frame: Any) -> None:  # noqa: ARG001
            logger.info("shutdown_signal_received", signal=signal.Signals(sig).name)
            shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        # worker.start() blocks, so it runs in a thread while we wait for a signal
        worker_task = asyncio.create_task(asyncio.to_thread(worker.start))

        await shutdown_event.wait()
        logger.info("shutting_down_worker")

        worker_task.cancel()
        try:
            await worker_task
        except asyncio.CancelledError:
            pass

        logger.info("worker_stopped")

    except Exception as e:
        logger.error("worker_failed", error=str(e), error_type=type(e).__name__)
        raise
    finally:
        await reset_dependencies()


def main() -> None:
    """CLI entrypoint registered as the lessor-worker console script."""
    try:
        asyncio.run(run_worker())
    except KeyboardInterrupt:
        logger.info("worker_interrupted")
        sys.exit(0)
    except Exception as e:
        logger.error("worker_startup_failed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    main()
