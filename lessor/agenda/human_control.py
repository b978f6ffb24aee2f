"""Human takeover and release of leads.

When a person takes over a lead, automation for that lead stops: the
lead is flagged and its pending tasks are paused. Releasing the lead
either resumes the paused tasks or cancels them. The dispatcher also
pauses any task whose lead is flagged, so a takeover that races a
running batch still pre-empts automation.
"""

from datetime import UTC, datetime
from uuid import UUID

from lessor.agenda.errors import SubjectNotFoundError
from lessor.agenda.models import Task, TaskStatus
from lessor.agenda.store import TaskStore
from lessor.audit.logger import ActivityLogger
from lessor.audit.models import AuditEvent, AuditStatus
from lessor.leads.models import Lead
from lessor.leads.store import LeadStore
from lessor.observability.logging import get_logger

logger = get_logger(__name__)

ACTOR_KEY = "human_control"


class HumanControlService:
    """Owns the human-control flag on leads."""

    def __init__(
        self,
        lead_store: LeadStore,
        task_store: TaskStore,
        activity_logger: ActivityLogger,
    ) -> None:
        self._leads = lead_store
        self._tasks = task_store
        self._activity = activity_logger

    async def take_over(
        self,
        lead_id: UUID,
        user_id: UUID,
        reason: str | None = None,
    ) -> int:
        """Hand a lead to a person and pause its pending tasks.

        Returns:
            Number of tasks paused by this call

        Raises:
            SubjectNotFoundError: If the lead does not exist
        """
        lead = await self._get_lead(lead_id)
        await self._leads.set_human_control(lead_id, True, user_id)

        pause_reason = reason or "human_controlled"
        now = datetime.now(UTC)
        paused = 0
        for task in await self._tasks.list_subject_tasks(
            lead.organization_id, lead_id, TaskStatus.PENDING
        ):
            if await self._tasks.compare_and_set_status(
                task.id,
                TaskStatus.PENDING,
                TaskStatus.PAUSED_HUMAN_CONTROL,
                pause_reason=pause_reason,
                paused_at=now,
            ):
                paused += 1

        logger.info(
            "lead_taken_over",
            lead_id=str(lead_id),
            user_id=str(user_id),
            paused_tasks=paused,
        )
        await self._activity.append(
            AuditEvent(
                organization_id=lead.organization_id,
                actor_key=ACTOR_KEY,
                action="human_takeover",
                status=AuditStatus.SUCCESS,
                message=f"Human takeover of {lead.display_name}, {paused} tasks paused",
                details={
                    "user_id": str(user_id),
                    "reason": pause_reason,
                    "paused_tasks": paused,
                },
                subject_id=lead_id,
            )
        )
        return paused

    async def release(
        self,
        lead_id: UUID,
        resume: bool = True,
        user_id: UUID | None = None,
    ) -> int:
        """Return a lead to automation.

        Args:
            lead_id: Lead to release
            resume: Move paused tasks back to pending; otherwise cancel them
            user_id: Person releasing the lead, for the audit trail

        Returns:
            Number of paused tasks resumed or cancelled
        """
        lead = await self._get_lead(lead_id)
        await self._leads.set_human_control(lead_id, False)

        paused_tasks = await self._tasks.list_subject_tasks(
            lead.organization_id, lead_id, TaskStatus.PAUSED_HUMAN_CONTROL
        )
        affected = 0
        for task in paused_tasks:
            if await self._settle_paused(task, resume):
                affected += 1

        logger.info(
            "lead_released",
            lead_id=str(lead_id),
            resume=resume,
            affected_tasks=affected,
        )
        verb = "resumed" if resume else "cancelled"
        await self._activity.append(
            AuditEvent(
                organization_id=lead.organization_id,
                actor_key=ACTOR_KEY,
                action="human_release",
                status=AuditStatus.SUCCESS,
                message=f"Released {lead.display_name}, {affected} tasks {verb}",
                details={
                    "user_id": str(user_id) if user_id else None,
                    "resume": resume,
                    "affected_tasks": affected,
                },
                subject_id=lead_id,
            )
        )
        return affected

    async def _settle_paused(self, task: Task, resume: bool) -> bool:
        if resume:
            return await self._tasks.compare_and_set_status(
                task.id,
                TaskStatus.PAUSED_HUMAN_CONTROL,
                TaskStatus.PENDING,
                pause_reason=None,
                paused_at=None,
            )
        return await self._tasks.compare_and_set_status(
            task.id,
            TaskStatus.PAUSED_HUMAN_CONTROL,
            TaskStatus.CANCELLED,
            completed_at=datetime.now(UTC),
        )

    async def _get_lead(self, lead_id: UUID) -> Lead:
        lead = await self._leads.get(lead_id)
        if lead is None:
            raise SubjectNotFoundError(
                f"Lead {lead_id} not found",
                details={"subject_id": str(lead_id)},
            )
        return lead


async def cancel_task(
    task_store: TaskStore,
    task_id: UUID,
    activity_logger: ActivityLogger | None = None,
    reason: str | None = None,
) -> bool:
    """Cancel a task that has not been dispatched.

    Only pending and paused tasks can be cancelled.

    Returns:
        True if cancelled, False if missing or already claimed/terminal
    """
    task = await task_store.get(task_id)
    if task is None:
        logger.warning("cancel_task_not_found", task_id=str(task_id))
        return False

    if task.status not in (TaskStatus.PENDING, TaskStatus.PAUSED_HUMAN_CONTROL):
        logger.warning(
            "cancel_task_wrong_status",
            task_id=str(task_id),
            status=task.status.value,
        )
        return False

    cancelled = await task_store.compare_and_set_status(
        task_id,
        task.status,
        TaskStatus.CANCELLED,
        last_error=reason,
        completed_at=datetime.now(UTC),
    )
    if not cancelled:
        logger.warning("cancel_task_lost_race", task_id=str(task_id))
        return False

    logger.info("task_cancelled", task_id=str(task_id), previous_status=task.status.value)
    if activity_logger is not None:
        await activity_logger.append(
            AuditEvent(
                organization_id=task.organization_id,
                actor_key=ACTOR_KEY,
                action="task_cancelled",
                status=AuditStatus.SUCCESS,
                message=reason or "Task cancelled",
                details={"previous_status": task.status.value, "agent_key": task.agent_key},
                subject_id=task.subject_id,
                task_id=task.id,
            )
        )
    return True
