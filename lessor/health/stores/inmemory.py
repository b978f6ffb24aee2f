"""In-memory health and credential stores."""

from uuid import UUID

from lessor.health.models import ProviderCredentials, ProviderHealthResult
from lessor.health.store import CredentialStore, ProviderHealthStore


class InMemoryProviderHealthStore(ProviderHealthStore):
    """In-memory implementation of ProviderHealthStore for testing and development."""

    def __init__(self) -> None:
        self._results: dict[tuple[UUID, str], ProviderHealthResult] = {}

    async def upsert(self, organization_id: UUID, result: ProviderHealthResult) -> None:
        self._results[(organization_id, result.provider)] = result

    async def get(self, organization_id: UUID, provider: str) -> ProviderHealthResult | None:
        return self._results.get((organization_id, provider))

    async def list_results(self, organization_id: UUID) -> list[ProviderHealthResult]:
        results = [r for (org_id, _), r in self._results.items() if org_id == organization_id]
        results.sort(key=lambda r: r.provider)
        return results


class InMemoryCredentialStore(CredentialStore):
    """In-memory implementation of CredentialStore for testing and development."""

    def __init__(self) -> None:
        self._credentials: dict[UUID, ProviderCredentials] = {}

    async def save(self, credentials: ProviderCredentials) -> None:
        self._credentials[credentials.organization_id] = credentials

    async def get_credentials(self, organization_id: UUID) -> ProviderCredentials:
        return self._credentials.get(
            organization_id,
            ProviderCredentials(organization_id=organization_id),
        )
