"""Job configuration models.

Configuration for background job infrastructure.
"""

from pydantic import BaseModel, Field, SecretStr


class HatchetConfig(BaseModel):
    """Hatchet background job orchestration configuration.

    Hatchet runs the dispatcher and the health monitor on cron schedules
    when the in-process scheduler is not used.
    """

    enabled: bool = Field(default=False, description="Enable Hatchet integration")
    server_url: str = Field(
        default="http://localhost:7077",
        description="Hatchet engine server URL",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Hatchet API key (from HATCHET_API_KEY env var)",
    )
    worker_concurrency: int = Field(
        default=4,
        ge=1,
        le=100,
        description="Number of concurrent job workers",
    )
    cron_dispatch_tasks: str = Field(
        default="* * * * *",
        description="Cron schedule for the task dispatcher (every minute)",
    )
    cron_check_health: str = Field(
        default="*/5 * * * *",
        description="Cron schedule for provider health checks (every 5 min)",
    )


class SchedulerConfig(BaseModel):
    """In-process polling loops started by the API lifespan."""

    enabled: bool = Field(
        default=False,
        description="Run the dispatcher and health monitor inside the API process",
    )


class JobsConfig(BaseModel):
    """Top-level jobs configuration."""

    hatchet: HatchetConfig = Field(
        default_factory=HatchetConfig,
        description="Hatchet configuration",
    )
    scheduler: SchedulerConfig = Field(
        default_factory=SchedulerConfig,
        description="In-process scheduler configuration",
    )
