"""HTTP-based provider probes."""

import time
from abc import abstractmethod
from typing import Any
from uuid import UUID

import httpx

from lessor.health.models import ProviderCredentials, ProviderHealthResult
from lessor.health.probes.base import CONNECTED, NOT_CONFIGURED, ProbeError, ProviderProbe
from lessor.observability.logging import get_logger

logger = get_logger(__name__)


class HttpProviderProbe(ProviderProbe):
    """Probe that issues one GET request and treats any 2xx as healthy.

    Subclasses describe the request; the shared httpx client is owned by
    the caller so connection pooling spans all probes.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @abstractmethod
    def build_request(self, credentials: ProviderCredentials) -> dict[str, Any] | None:
        """Keyword arguments for AsyncClient.get, or None when credentials are missing."""
        pass

    async def check(
        self,
        organization_id: UUID,
        credentials: ProviderCredentials,
    ) -> ProviderHealthResult:
        request = self.build_request(credentials)
        if request is None:
            return ProviderHealthResult(
                provider=self.provider,
                healthy=False,
                message=NOT_CONFIGURED,
            )

        started = time.perf_counter()
        try:
            response = await self._client.get(**request)
        except httpx.HTTPError as e:
            logger.debug(
                "provider_probe_request_failed",
                provider=self.provider,
                error_type=type(e).__name__,
            )
            raise ProbeError(self.provider, str(e) or type(e).__name__) from e
        latency_ms = int((time.perf_counter() - started) * 1000)

        healthy = response.is_success
        return ProviderHealthResult(
            provider=self.provider,
            healthy=healthy,
            message=CONNECTED if healthy else f"Error: {response.status_code}",
            latency_ms=latency_ms,
        )
