"""Provider probe interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from lessor.health.models import ProviderCredentials, ProviderHealthResult

NOT_CONFIGURED = "Not configured"
CONNECTED = "Connected"


class ProbeError(Exception):
    """A probe could not reach or interpret its provider."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ProviderProbe(ABC):
    """Lightweight liveness check against one external provider."""

    @property
    @abstractmethod
    def provider(self) -> str:
        """Provider identifier this probe checks."""
        pass

    @abstractmethod
    async def check(
        self,
        organization_id: UUID,
        credentials: ProviderCredentials,
    ) -> ProviderHealthResult:
        """Probe the provider with the organization's credentials.

        Raises:
            ProbeError: If the provider cannot be reached
        """
        pass
