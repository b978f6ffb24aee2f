"""Task cancellation."""

from uuid import UUID

from fastapi import APIRouter

from lessor.agenda.human_control import cancel_task
from lessor.api.dependencies import ActivityLoggerDep, TaskStoreDep
from lessor.api.exceptions import TaskNotCancellableError, TaskNotFoundError
from lessor.api.models.requests import CancelTaskRequest, CancelTaskResponse

router = APIRouter(prefix="/tasks")


@router.post("/{task_id}/cancel", response_model=CancelTaskResponse)
async def cancel(
    task_id: UUID,
    request: CancelTaskRequest,
    task_store: TaskStoreDep,
    activity_logger: ActivityLoggerDep,
) -> CancelTaskResponse:
    """Cancel a pending or paused task."""
    task = await task_store.get(task_id)
    if task is None:
        raise TaskNotFoundError(f"Task {task_id} not found")

    cancelled = await cancel_task(task_store, task_id, activity_logger, request.reason)
    if not cancelled:
        raise TaskNotCancellableError(f"Task {task_id} can no longer be cancelled")
    return CancelTaskResponse(task_id=task_id, cancelled=True)
