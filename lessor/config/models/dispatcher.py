"""Task dispatcher configuration."""

from pydantic import BaseModel, Field


class DispatcherConfig(BaseModel):
    """Configuration for the task dispatch loop."""

    batch_size: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Maximum due tasks processed per run",
    )
    handler_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound on a single action handler invocation",
    )
    compliance_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound on a single compliance check",
    )
    regulated_action_kinds: list[str] = Field(
        default_factory=lambda: ["call", "sms"],
        description="Action kinds that must pass the compliance gate",
    )
    block_degraded_agents: bool = Field(
        default=True,
        description="Fail tasks owned by degraded agents instead of dispatching them",
    )
    poll_interval_seconds: int = Field(
        default=60,
        ge=1,
        description="Cadence of the in-process dispatch loop",
    )
