"""Provider health monitoring configuration."""

from pydantic import BaseModel, Field

DEFAULT_PROVIDERS = ["twilio", "bland_ai", "openai", "persona", "doorloop", "resend"]


class HealthConfig(BaseModel):
    """Configuration for the provider health monitor."""

    providers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PROVIDERS),
        description="Providers probed on every full health check",
    )
    probe_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout applied to each provider probe",
    )
    max_concurrency: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Maximum probes in flight at once",
    )
    interval_seconds: int = Field(
        default=300,
        ge=10,
        description="Cadence of the in-process health loop",
    )
