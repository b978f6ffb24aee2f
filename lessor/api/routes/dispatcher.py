"""Manual dispatcher trigger."""

from fastapi import APIRouter

from lessor.agenda.models import BatchResult
from lessor.api.dependencies import DispatcherDep
from lessor.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/dispatcher")


@router.post("/run", response_model=BatchResult)
async def run_dispatcher(dispatcher: DispatcherDep) -> BatchResult:
    """Run one dispatch batch now.

    Safe to call while scheduled runs are active: tasks are claimed by
    compare-and-swap so no task is handled twice.
    """
    logger.info("dispatcher_run_requested")
    return await dispatcher.run_once()
