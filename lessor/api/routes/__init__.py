"""API route registration."""

from fastapi import APIRouter, FastAPI

from lessor.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    """Create the v1 API router with all routes."""
    router = APIRouter(prefix="/v1")

    from lessor.api.routes.dispatcher import router as dispatcher_router
    from lessor.api.routes.leads import router as leads_router
    from lessor.api.routes.organizations import router as organizations_router
    from lessor.api.routes.tasks import router as tasks_router

    router.include_router(dispatcher_router, tags=["Dispatcher"])
    router.include_router(organizations_router, tags=["Organizations"])
    router.include_router(leads_router, tags=["Leads"])
    router.include_router(tasks_router, tags=["Tasks"])

    logger.debug(
        "v1_router_created",
        routes=["dispatcher", "organizations", "leads", "tasks"],
    )

    return router


def register_routes(app: FastAPI) -> None:
    """Register all routes with the FastAPI application."""
    app.include_router(create_v1_router())

    from lessor.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])

    logger.info("routes_registered")
