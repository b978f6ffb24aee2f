"""PostgreSQL health and credential stores.

Snapshots live in `provider_health` (unique per organization and
provider); credentials in `organization_credentials` (one row per
organization).
"""

from typing import Any
from uuid import UUID

from lessor.db.errors import ConnectionError
from lessor.db.pool import PostgresPool
from lessor.health.models import ProviderCredentials, ProviderHealthResult
from lessor.health.store import CredentialStore, ProviderHealthStore
from lessor.observability.logging import get_logger

logger = get_logger(__name__)

_CREDENTIAL_FIELDS = (
    "twilio_account_sid",
    "twilio_auth_token",
    "bland_api_key",
    "openai_api_key",
    "persona_api_key",
    "doorloop_api_key",
    "resend_api_key",
)


class PostgresProviderHealthStore(ProviderHealthStore):
    """PostgreSQL implementation of ProviderHealthStore."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def upsert(self, organization_id: UUID, result: ProviderHealthResult) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO provider_health (
                        organization_id, provider, healthy, message, latency_ms, tested_at
                    )
                    VALUES ($1, $2, $3, $4, $5, $6)
                    ON CONFLICT (organization_id, provider) DO UPDATE SET
                        healthy = EXCLUDED.healthy,
                        message = EXCLUDED.message,
                        latency_ms = EXCLUDED.latency_ms,
                        tested_at = EXCLUDED.tested_at
                    """,
                    organization_id,
                    result.provider,
                    result.healthy,
                    result.message,
                    result.latency_ms,
                    result.tested_at,
                )
        except Exception as e:
            logger.error(
                "postgres_upsert_provider_health_error",
                organization_id=str(organization_id),
                provider=result.provider,
                error=str(e),
            )
            raise ConnectionError(f"Failed to save provider health: {e}", cause=e) from e

    async def get(self, organization_id: UUID, provider: str) -> ProviderHealthResult | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    SELECT provider, healthy, message, latency_ms, tested_at
                    FROM provider_health
                    WHERE organization_id = $1 AND provider = $2
                    """,
                    organization_id,
                    provider,
                )
                return self._row_to_result(row) if row else None
        except Exception as e:
            logger.error("postgres_get_provider_health_error", provider=provider, error=str(e))
            raise ConnectionError(f"Failed to get provider health: {e}", cause=e) from e

    async def list_results(self, organization_id: UUID) -> list[ProviderHealthResult]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT provider, healthy, message, latency_ms, tested_at
                    FROM provider_health
                    WHERE organization_id = $1
                    ORDER BY provider
                    """,
                    organization_id,
                )
                return [self._row_to_result(row) for row in rows]
        except Exception as e:
            logger.error(
                "postgres_list_provider_health_error",
                organization_id=str(organization_id),
                error=str(e),
            )
            raise ConnectionError(f"Failed to list provider health: {e}", cause=e) from e

    def _row_to_result(self, row: Any) -> ProviderHealthResult:
        return ProviderHealthResult(
            provider=row["provider"],
            healthy=row["healthy"],
            message=row["message"] or "",
            latency_ms=row["latency_ms"],
            tested_at=row["tested_at"],
        )


class PostgresCredentialStore(CredentialStore):
    """PostgreSQL implementation of CredentialStore."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def get_credentials(self, organization_id: UUID) -> ProviderCredentials:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    SELECT {', '.join(_CREDENTIAL_FIELDS)}
                    FROM organization_credentials
                    WHERE organization_id = $1
                    """,
                    organization_id,
                )
        except Exception as e:
            # Never log credential values, only the failure
            logger.error(
                "postgres_get_credentials_error",
                organization_id=str(organization_id),
                error_type=type(e).__name__,
            )
            raise ConnectionError(f"Failed to load credentials: {type(e).__name__}", cause=e) from e

        if row is None:
            return ProviderCredentials(organization_id=organization_id)
        return ProviderCredentials(
            organization_id=organization_id,
            **{field: row[field] for field in _CREDENTIAL_FIELDS},
        )
