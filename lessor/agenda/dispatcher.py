"""Task dispatcher: drains due tasks through the gating pipeline.

One call to run_once processes a bounded batch:

1. Resolve the lead (subject_not_found)
2. Pause the task if a person has taken over the lead
3. Resolve the agent in the lead's organization (agent_not_found,
   agent_disabled, agent_degraded)
4. Check compliance for regulated action kinds
5. Resolve the handler (handler_not_found)
6. Claim the task with a pending -> in_progress compare-and-set
7. Run the handler and record completed or failed

Tasks are processed one at a time in scheduled_for order. Several
dispatchers may run concurrently; the claim in step 6 guarantees a
handler runs at most once per task.
"""

import asyncio
import time
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from structlog.contextvars import bound_contextvars

from lessor.agenda.errors import (
    AgentDegradedError,
    AgentDisabledError,
    AgentNotFoundError,
    ComplianceBlockedError,
    ComplianceCheckError,
    DispatchError,
    HandlerError,
    HandlerTimeoutError,
    StoreConflictError,
    SubjectNotFoundError,
)
from lessor.agenda.handlers import ActionHandler, HandlerOutcome, HandlerRegistry
from lessor.agenda.models import (
    BatchResult,
    Task,
    TaskOutcome,
    TaskResult,
    TaskStatus,
)
from lessor.agenda.store import TaskStore
from lessor.agents.models import Agent, AgentStatus
from lessor.agents.store import AgentStore
from lessor.audit.logger import ActivityLogger
from lessor.audit.models import AuditEvent, AuditStatus
from lessor.compliance.gate import ComplianceGate
from lessor.config.models.dispatcher import DispatcherConfig
from lessor.leads.models import Lead
from lessor.leads.store import LeadStore
from lessor.observability.logging import get_logger
from lessor.observability.metrics import (
    DISPATCH_BATCH_LATENCY,
    HANDLER_LATENCY,
    TASKS_PROCESSED,
)

logger = get_logger(__name__)

ACTOR_KEY = "task_dispatcher"
HUMAN_CONTROLLED_REASON = "human_controlled"
FAILURE_NOT_RECORDED_REASON = "failure_not_recorded"


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class TaskDispatcher:
    """Processes due tasks one bounded batch at a time.

    Holds no state between runs; agent status is re-read for every task
    so a degrade written by the health monitor mid-batch is honoured.
    """

    def __init__(
        self,
        task_store: TaskStore,
        lead_store: LeadStore,
        agent_store: AgentStore,
        compliance_gate: ComplianceGate,
        handlers: HandlerRegistry,
        activity_logger: ActivityLogger,
        config: DispatcherConfig | None = None,
    ) -> None:
        self._tasks = task_store
        self._leads = lead_store
        self._agents = agent_store
        self._compliance = compliance_gate
        self._handlers = handlers
        self._activity = activity_logger
        self._config = config or DispatcherConfig()
        self._regulated = frozenset(self._config.regulated_action_kinds)

    async def run_once(self, now: datetime | None = None) -> BatchResult:
        """Process one batch of due tasks.

        Args:
            now: Due-time threshold; defaults to the current time

        Returns:
            Aggregate counts and per-task outcomes

        Raises:
            StoreError: If the due-task fetch fails. Nothing has been
                claimed at that point, so the call can be retried.
        """
        run_id = uuid4()
        started = time.perf_counter()

        with bound_contextvars(dispatch_run_id=str(run_id)):
            before = now or _utc_now()
            try:
                tasks = await self._tasks.get_due_tasks(
                    before=before,
                    limit=self._config.batch_size,
                )
            except Exception as e:
                logger.exception("dispatch_fetch_failed", error=str(e))
                await self._record(
                    action="dispatcher_error",
                    status=AuditStatus.FAILURE,
                    message=f"Dispatcher failed to fetch due tasks: {e}",
                    details={"error": str(e), "error_type": type(e).__name__},
                    execution_ms=_elapsed_ms(started),
                )
                raise

            if not tasks:
                logger.debug("dispatch_queue_empty")
                await self._record(
                    action="queue_check",
                    status=AuditStatus.SUCCESS,
                    message="No pending tasks to process",
                    details={"run_id": str(run_id), "tasks_found": 0},
                    execution_ms=_elapsed_ms(started),
                )
                return BatchResult(execution_ms=_elapsed_ms(started))

            logger.info("dispatch_batch_started", count=len(tasks))

            result = BatchResult()
            for task in tasks:
                result.record(await self._process_task(task))

            result.execution_ms = _elapsed_ms(started)
            DISPATCH_BATCH_LATENCY.observe(result.execution_ms / 1000)

            await self._record(
                action="batch_complete",
                status=AuditStatus.SUCCESS,
                message=(
                    f"Processed {result.processed} tasks: {result.dispatched} dispatched, "
                    f"{result.failed} failed, {result.human_controlled} paused, "
                    f"{result.skipped} skipped"
                ),
                details={
                    "run_id": str(run_id),
                    "processed": result.processed,
                    "dispatched": result.dispatched,
                    "failed": result.failed,
                    "human_controlled": result.human_controlled,
                    "skipped": result.skipped,
                },
                execution_ms=result.execution_ms,
            )

            logger.info(
                "dispatch_batch_complete",
                processed=result.processed,
                dispatched=result.dispatched,
                failed=result.failed,
                human_controlled=result.human_controlled,
                skipped=result.skipped,
                execution_ms=result.execution_ms,
            )
            return result

    async def _process_task(self, task: Task) -> TaskResult:
        started = time.perf_counter()
        current = TaskStatus.PENDING

        with bound_contextvars(task_id=str(task.id), agent_key=task.agent_key):
            try:
                lead = await self._resolve_lead(task)

                if lead.is_human_controlled:
                    return await self._pause_for_human_control(task, lead, started)

                agent = await self._resolve_agent(task, lead)

                if task.action_kind in self._regulated:
                    await self._check_compliance(task, lead)

                handler = self._handlers.resolve(task.agent_key, task.action_kind)

                claimed = await self._tasks.compare_and_set_status(
                    task.id,
                    TaskStatus.PENDING,
                    TaskStatus.IN_PROGRESS,
                    executed_at=_utc_now(),
                )
                if not claimed:
                    raise StoreConflictError(f"Task {task.id} was claimed by another dispatcher")
                current = TaskStatus.IN_PROGRESS

                outcome = await self._invoke_handler(handler, task, lead, agent)
                return await self._complete(task, lead, outcome, started)

            except StoreConflictError as e:
                logger.debug("task_claimed_elsewhere", reason=e.reason)
                TASKS_PROCESSED.labels(outcome=TaskOutcome.SKIPPED.value, reason=e.reason).inc()
                return TaskResult(
                    task_id=task.id,
                    outcome=TaskOutcome.SKIPPED,
                    reason=e.reason,
                    execution_ms=_elapsed_ms(started),
                )
            except DispatchError as e:
                return await self._fail(task, current, e, started)
            except Exception as e:
                logger.exception("task_processing_error", error=str(e))
                error = DispatchError(
                    str(e),
                    reason="task_error",
                    details={"error_type": type(e).__name__},
                )
                return await self._fail(task, current, error, started)

    async def _resolve_lead(self, task: Task) -> Lead:
        lead = await self._leads.get(task.subject_id)
        if lead is None or lead.organization_id != task.organization_id:
            raise SubjectNotFoundError(
                f"Lead {task.subject_id} not found",
                details={"subject_id": str(task.subject_id)},
            )
        return lead

    async def _resolve_agent(self, task: Task, lead: Lead) -> Agent:
        agent = await self._agents.get_by_key(lead.organization_id, task.agent_key)
        if agent is None:
            raise AgentNotFoundError(
                f"Agent {task.agent_key} not found",
                details={"agent_key": task.agent_key},
            )

        if not agent.is_dispatchable:
            raise AgentDisabledError(
                f"Agent {task.agent_key} is disabled",
                details={"agent_key": task.agent_key, "agent_status": agent.status.value},
            )

        if agent.status == AgentStatus.DEGRADED and self._config.block_degraded_agents:
            raise AgentDegradedError(
                f"Agent {task.agent_key} is degraded: {agent.last_error_message or 'unhealthy providers'}",
                details={
                    "agent_key": task.agent_key,
                    "last_error_message": agent.last_error_message,
                },
            )

        return agent

    async def _check_compliance(self, task: Task, lead: Lead) -> None:
        try:
            result = await asyncio.wait_for(
                self._compliance.check(
                    lead.organization_id,
                    lead.id,
                    task.action_kind,
                    task.agent_key,
                ),
                timeout=self._config.compliance_timeout_seconds,
            )
        except ComplianceCheckError:
            raise
        except TimeoutError:
            raise ComplianceCheckError(
                "Compliance check timed out",
                details={"timeout_seconds": self._config.compliance_timeout_seconds},
            ) from None
        except Exception as e:
            raise ComplianceCheckError(
                f"Compliance check failed: {e}",
                details={"error_type": type(e).__name__},
            ) from e

        if not result.passed:
            raise ComplianceBlockedError(result.violations)

    async def _invoke_handler(
        self,
        handler: ActionHandler,
        task: Task,
        lead: Lead,
        agent: Agent,
    ) -> HandlerOutcome:
        started = time.perf_counter()
        try:
            outcome = await asyncio.wait_for(
                handler.handle(task, lead, agent),
                timeout=self._config.handler_timeout_seconds,
            )
        except DispatchError:
            raise
        except TimeoutError:
            raise HandlerTimeoutError(
                f"Handler timed out after {self._config.handler_timeout_seconds}s",
                details={"timeout_seconds": self._config.handler_timeout_seconds},
            ) from None
        except Exception as e:
            raise HandlerError(str(e), details={"error_type": type(e).__name__}) from e
        finally:
            HANDLER_LATENCY.labels(
                agent_key=task.agent_key,
                action_kind=task.action_kind,
            ).observe(time.perf_counter() - started)

        if not outcome.success:
            raise HandlerError(
                outcome.error or "Handler reported failure",
                details=dict(outcome.detail),
            )
        return outcome

    async def _pause_for_human_control(
        self,
        task: Task,
        lead: Lead,
        started: float,
    ) -> TaskResult:
        paused = await self._tasks.compare_and_set_status(
            task.id,
            TaskStatus.PENDING,
            TaskStatus.PAUSED_HUMAN_CONTROL,
            pause_reason=HUMAN_CONTROLLED_REASON,
            paused_at=_utc_now(),
        )
        if not paused:
            raise StoreConflictError(f"Task {task.id} changed before it could be paused")

        logger.info("task_paused_human_control", subject_id=str(lead.id))
        TASKS_PROCESSED.labels(
            outcome=TaskOutcome.HUMAN_CONTROLLED.value,
            reason=HUMAN_CONTROLLED_REASON,
        ).inc()

        execution_ms = _elapsed_ms(started)
        await self._record(
            action="task_paused",
            status=AuditStatus.SKIPPED,
            message=f"Task paused: {lead.display_name} is under human control",
            organization_id=task.organization_id,
            task=task,
            details={
                "reason": HUMAN_CONTROLLED_REASON,
                "agent_key": task.agent_key,
                "action_kind": task.action_kind,
                "human_controlled_by": (
                    str(lead.human_controlled_by) if lead.human_controlled_by else None
                ),
            },
            execution_ms=execution_ms,
        )
        return TaskResult(
            task_id=task.id,
            outcome=TaskOutcome.HUMAN_CONTROLLED,
            reason=HUMAN_CONTROLLED_REASON,
            execution_ms=execution_ms,
        )

    async def _complete(
        self,
        task: Task,
        lead: Lead,
        outcome: HandlerOutcome,
        started: float,
    ) -> TaskResult:
        # The handler already ran; a failed write must not turn this into a failure
        try:
            completed = await self._tasks.compare_and_set_status(
                task.id,
                TaskStatus.IN_PROGRESS,
                TaskStatus.COMPLETED,
                completed_at=_utc_now(),
            )
        except Exception as e:
            logger.exception("task_completion_write_failed", error=str(e))
            completed = False
        if not completed:
            logger.warning("task_completion_not_recorded")

        execution_ms = _elapsed_ms(started)
        logger.info(
            "task_dispatched",
            action_kind=task.action_kind,
            execution_ms=execution_ms,
            cost=outcome.cost,
        )
        TASKS_PROCESSED.labels(outcome=TaskOutcome.DISPATCHED.value, reason="none").inc()

        await self._record(
            action="task_dispatched",
            status=AuditStatus.SUCCESS,
            message=f"Executed {task.action_kind} for {lead.display_name}",
            organization_id=task.organization_id,
            task=task,
            details={
                "agent_key": task.agent_key,
                "action_kind": task.action_kind,
                "result": outcome.detail,
                "completion_not_recorded": not completed,
            },
            execution_ms=execution_ms,
            cost=outcome.cost,
        )
        return TaskResult(
            task_id=task.id,
            outcome=TaskOutcome.DISPATCHED,
            execution_ms=execution_ms,
        )

    async def _fail(
        self,
        task: Task,
        current: TaskStatus,
        error: DispatchError,
        started: float,
    ) -> TaskResult:
        try:
            recorded = await self._tasks.compare_and_set_status(
                task.id,
                current,
                TaskStatus.FAILED,
                last_error=error.message,
                completed_at=_utc_now(),
            )
        except Exception as e:
            logger.exception("task_failure_not_recorded", reason=error.reason, error=str(e))
            return await self._failure_not_recorded(task, current, error, e, started)

        if not recorded:
            # Someone else moved the task first, e.g. a human takeover
            logger.info("task_failure_superseded", reason=error.reason)
            TASKS_PROCESSED.labels(
                outcome=TaskOutcome.SKIPPED.value,
                reason=StoreConflictError.reason,
            ).inc()
            return TaskResult(
                task_id=task.id,
                outcome=TaskOutcome.SKIPPED,
                reason=StoreConflictError.reason,
                execution_ms=_elapsed_ms(started),
            )

        logger.warning("task_failed", reason=error.reason, error=error.message)
        metric_reason = (
            "compliance_blocked" if isinstance(error, ComplianceBlockedError) else error.reason
        )
        TASKS_PROCESSED.labels(outcome=TaskOutcome.FAILED.value, reason=metric_reason).inc()

        execution_ms = _elapsed_ms(started)
        await self._record(
            action=self._failure_action(error),
            status=AuditStatus.FAILURE,
            message=error.message,
            organization_id=task.organization_id,
            task=task,
            details={
                "reason": error.reason,
                "agent_key": task.agent_key,
                "action_kind": task.action_kind,
                **error.details,
            },
            execution_ms=execution_ms,
        )
        return TaskResult(
            task_id=task.id,
            outcome=TaskOutcome.FAILED,
            reason=error.reason,
            execution_ms=execution_ms,
        )

    async def _failure_not_recorded(
        self,
        task: Task,
        current: TaskStatus,
        error: DispatchError,
        store_error: Exception,
        started: float,
    ) -> TaskResult:
        """Report a failure whose status write raised.

        The task is still in its previous status, so it is counted as
        skipped rather than failed.
        """
        TASKS_PROCESSED.labels(
            outcome=TaskOutcome.SKIPPED.value,
            reason=FAILURE_NOT_RECORDED_REASON,
        ).inc()

        execution_ms = _elapsed_ms(started)
        await self._record(
            action="task_failure_not_recorded",
            status=AuditStatus.FAILURE,
            message=f"Could not mark task failed: {store_error}",
            organization_id=task.organization_id,
            task=task,
            details={
                "reason": error.reason,
                "error": error.message,
                "store_error": str(store_error),
                "task_status": current.value,
                "agent_key": task.agent_key,
                "action_kind": task.action_kind,
            },
            execution_ms=execution_ms,
        )
        return TaskResult(
            task_id=task.id,
            outcome=TaskOutcome.SKIPPED,
            reason=FAILURE_NOT_RECORDED_REASON,
            execution_ms=execution_ms,
        )

    @staticmethod
    def _failure_action(error: DispatchError) -> str:
        if isinstance(error, ComplianceBlockedError):
            return "compliance_blocked"
        if isinstance(error, ComplianceCheckError):
            return "compliance_error"
        if error.reason == "task_error":
            return "task_error"
        return "task_failed"

    async def _record(
        self,
        *,
        action: str,
        status: AuditStatus,
        message: str,
        details: dict[str, Any],
        organization_id: UUID | None = None,
        task: Task | None = None,
        execution_ms: int = 0,
        cost: float = 0.0,
    ) -> None:
        event = AuditEvent(
            organization_id=organization_id,
            actor_key=ACTOR_KEY,
            action=action,
            status=status,
            message=message,
            details=details,
            subject_id=task.subject_id if task else None,
            task_id=task.id if task else None,
            execution_ms=execution_ms,
            cost=cost,
        )
        try:
            await self._activity.append(event)
        except Exception as e:
            logger.warning("audit_append_failed", action=action, error=str(e))
