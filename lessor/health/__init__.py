"""Provider health monitoring and the agent-level circuit breaker."""

from lessor.health.models import HealthReport, ProviderCredentials, ProviderHealthResult
from lessor.health.monitor import HealthMonitor
from lessor.health.probes.base import ProbeError, ProviderProbe
from lessor.health.store import CredentialStore, ProviderHealthStore

__all__ = [
    "HealthMonitor",
    "HealthReport",
    "ProviderCredentials",
    "ProviderHealthResult",
    "ProviderProbe",
    "ProbeError",
    "CredentialStore",
    "ProviderHealthStore",
]
