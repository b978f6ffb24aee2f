"""Provider health models."""

from datetime import UTC, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, SecretStr


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class ProviderHealthResult(BaseModel):
    """Outcome of one provider probe. Only the latest per provider is kept."""

    model_config = ConfigDict(frozen=True)

    provider: str = Field(..., description="Provider identifier")
    healthy: bool = Field(..., description="Whether the provider answered successfully")
    message: str = Field(default="", description="Connected, Not configured, or the error")
    latency_ms: int | None = Field(default=None, ge=0, description="Round-trip time")
    tested_at: datetime = Field(default_factory=utc_now)


class HealthReport(BaseModel):
    """Result of a full health check for one organization."""

    organization_id: UUID
    services: dict[str, ProviderHealthResult] = Field(default_factory=dict)
    agents_affected: int = Field(default=0, ge=0)
    execution_ms: int = Field(default=0, ge=0)

    @property
    def all_healthy(self) -> bool:
        return all(result.healthy for result in self.services.values())

    @property
    def unhealthy_providers(self) -> list[str]:
        return sorted(p for p, result in self.services.items() if not result.healthy)


class ProviderCredentials(BaseModel):
    """Per-organization provider credentials.

    Tenant data, loaded from the credential store. Secret values never
    render in reprs or logs.
    """

    organization_id: UUID
    twilio_account_sid: SecretStr | None = None
    twilio_auth_token: SecretStr | None = None
    bland_api_key: SecretStr | None = None
    openai_api_key: SecretStr | None = None
    persona_api_key: SecretStr | None = None
    doorloop_api_key: SecretStr | None = None
    resend_api_key: SecretStr | None = None

    def secret(self, field: str) -> str | None:
        """Plain value of a credential field, or None when unset or blank."""
        value = getattr(self, field)
        if value is None:
            return None
        plain = value.get_secret_value().strip()
        return plain or None
