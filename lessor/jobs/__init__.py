"""Background job infrastructure.

The dispatcher and the health monitor are stateless units of work. They
run either on Hatchet cron workflows or in the API process through
IntervalScheduler.

Usage:
    from lessor.jobs import HatchetClient
    from lessor.jobs.workflows.task_dispatch import register_workflow

    client = HatchetClient(config)
    hatchet = client.get_client()
    if hatchet is not None:
        register_workflow(hatchet, dispatcher)
"""

from lessor.jobs.client import HatchetClient
from lessor.jobs.scheduler import IntervalScheduler

__all__ = ["HatchetClient", "IntervalScheduler"]
