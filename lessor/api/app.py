"""FastAPI application factory.

Creates and configures the FastAPI application with middleware,
exception handlers, route registration, and the in-process schedulers.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from lessor import __version__
from lessor.api.dependencies import (
    get_agent_store,
    get_dispatcher,
    get_health_monitor,
    get_settings,
    reset_dependencies,
)
from lessor.api.exceptions import LessorAPIError
from lessor.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from lessor.api.routes import register_routes
from lessor.db.errors import StoreError
from lessor.jobs.scheduler import IntervalScheduler
from lessor.jobs.workflows.health_check import CheckHealthInput, CheckProviderHealthWorkflow
from lessor.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def _start_schedulers() -> list[IntervalScheduler]:
    settings = get_settings()
    dispatcher = await get_dispatcher()
    health_workflow = CheckProviderHealthWorkflow(
        await get_health_monitor(),
        await get_agent_store(),
    )

    async def check_health() -> None:
        await health_workflow.run(CheckHealthInput())

    schedulers = [
        IntervalScheduler(
            "dispatch-due-tasks",
            dispatcher.run_once,
            settings.dispatcher.poll_interval_seconds,
        ),
        IntervalScheduler(
            "check-provider-health",
            check_health,
            settings.health.interval_seconds,
        ),
    ]
    for scheduler in schedulers:
        await scheduler.start()
    return schedulers


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:  # noqa: ARG001
    """Start polling loops when enabled and release shared clients on shutdown."""
    settings = get_settings()
    schedulers: list[IntervalScheduler] = []
    if settings.jobs.scheduler.enabled:
        schedulers = await _start_schedulers()

    try:
        yield
    finally:
        for scheduler in schedulers:
            await scheduler.stop()
        await reset_dependencies()
        logger.info("app_shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    setup_logging(settings.observability.logging)

    app = FastAPI(
        title="Lessor API",
        description="Agent task orchestration and provider health circuit-breaking",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=settings.api.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    register_routes(app)

    logger.info(
        "app_created",
        debug=settings.debug,
        storage_backend=settings.storage.backend,
        scheduler_enabled=settings.jobs.scheduler.enabled,
    )

    return app


def _error_response(status_code: int, body: ErrorBody) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=body).model_dump(mode="json"),
    )


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(LessorAPIError)
    async def lessor_api_error_handler(request: Request, exc: LessorAPIError) -> JSONResponse:
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(
            exc.status_code,
            ErrorBody(code=exc.error_code, message=exc.message),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("validation_error", errors=exc.errors(), path=request.url.path)

        details = [
            ErrorDetail(field=".".join(str(loc) for loc in error["loc"]), message=error["msg"])
            for error in exc.errors()
        ]
        return _error_response(
            400,
            ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Request validation failed",
                details=details,
            ),
        )

    @app.exception_handler(ValidationError)
    async def pydantic_validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        logger.warning("pydantic_validation_error", errors=exc.errors(), path=request.url.path)

        details = [
            ErrorDetail(field=".".join(str(loc) for loc in error["loc"]), message=error["msg"])
            for error in exc.errors()
        ]
        return _error_response(
            400,
            ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Data validation failed",
                details=details,
            ),
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.error(
            "store_unavailable",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(
            503,
            ErrorBody(code=ErrorCode.STORE_UNAVAILABLE, message="Storage backend unavailable"),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(
            500,
            ErrorBody(code=ErrorCode.INTERNAL_ERROR, message="An unexpected error occurred"),
        )

    logger.debug("exception_handlers_registered")


# Create the app instance for uvicorn
app = create_app()
