"""Health snapshot and credential store interfaces."""

from abc import ABC, abstractmethod
from uuid import UUID

from lessor.health.models import ProviderCredentials, ProviderHealthResult


class ProviderHealthStore(ABC):
    """Latest health snapshot per (organization, provider)."""

    @abstractmethod
    async def upsert(self, organization_id: UUID, result: ProviderHealthResult) -> None:
        """Replace the snapshot for the result's provider."""
        pass

    @abstractmethod
    async def get(self, organization_id: UUID, provider: str) -> ProviderHealthResult | None:
        """Get the latest snapshot for one provider."""
        pass

    @abstractmethod
    async def list_results(self, organization_id: UUID) -> list[ProviderHealthResult]:
        """List latest snapshots for an organization, ordered by provider."""
        pass


class CredentialStore(ABC):
    """Read access to per-organization provider credentials."""

    @abstractmethod
    async def get_credentials(self, organization_id: UUID) -> ProviderCredentials:
        """Load credentials for an organization.

        Returns an empty credential set when none are stored, so every
        probe reports "Not configured".
        """
        pass
