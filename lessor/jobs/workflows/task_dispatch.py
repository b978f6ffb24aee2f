"""Task dispatch workflow.

Scheduled job that drains one batch of due tasks. Runs every minute by
default; overlapping runs are safe because task claims are
compare-and-set.
"""

from dataclasses import dataclass
from typing import Any

from lessor.agenda.dispatcher import TaskDispatcher
from lessor.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class DispatchTasksOutput:
    """Output from the dispatch workflow."""

    dispatched: int
    skipped: int
    failed: int
    human_controlled: int
    success: bool
    error: str | None = None


class DispatchDueTasksWorkflow:
    """Workflow wrapper around TaskDispatcher.run_once."""

    WORKFLOW_NAME = "dispatch-due-tasks"
    CRON_SCHEDULE = "* * * * *"  # Every minute

    def __init__(self, dispatcher: TaskDispatcher) -> None:
        self._dispatcher = dispatcher

    async def run(self) -> DispatchTasksOutput:
        """Execute one dispatcher batch.

        A catastrophic dispatcher failure is reported in the output
        instead of raising, so the job runner records it as a failed run.
        """
        try:
            result = await self._dispatcher.run_once()
        except Exception as e:
            logger.error("dispatch_due_tasks_failed", error=str(e))
            return DispatchTasksOutput(
                dispatched=0,
                skipped=0,
                failed=0,
                human_controlled=0,
                success=False,
                error=str(e),
            )

        return DispatchTasksOutput(
            dispatched=result.dispatched,
            skipped=result.skipped,
            failed=result.failed,
            human_controlled=result.human_controlled,
            success=True,
        )


def register_workflow(
    hatchet: Any,
    dispatcher: TaskDispatcher,
    cron: str | None = None,
) -> Any:
    """Register the dispatch workflow with Hatchet.

    Args:
        hatchet: Hatchet SDK instance
        dispatcher: Dispatcher the workflow drives
        cron: Override for the default schedule

    Returns:
        Registered workflow
    """
    workflow_instance = DispatchDueTasksWorkflow(dispatcher)

    @hatchet.workflow(
        name=DispatchDueTasksWorkflow.WORKFLOW_NAME,
        on_crons=[cron or DispatchDueTasksWorkflow.CRON_SCHEDULE],
    )
    class HatchetDispatchDueTasksWorkflow:
        """Hatchet workflow wrapper for task dispatch."""

        @hatchet.step(retries=0)
        async def dispatch(self, context: Any) -> dict:  # noqa: ARG002
            """Execute the dispatch step."""
            result = await workflow_instance.run()
            return {
                "dispatched": result.dispatched,
                "skipped": result.skipped,
                "failed": result.failed,
                "human_controlled": result.human_controlled,
                "success": result.success,
                "error": result.error,
            }

    return HatchetDispatchDueTasksWorkflow
