"""Provider health probes."""

from lessor.health.probes.base import CONNECTED, NOT_CONFIGURED, ProbeError, ProviderProbe
from lessor.health.probes.http import HttpProviderProbe
from lessor.health.probes.providers import (
    PROBE_TYPES,
    BlandProbe,
    DoorLoopProbe,
    OpenAIProbe,
    PersonaProbe,
    ResendProbe,
    TwilioProbe,
    default_probes,
)

__all__ = [
    "ProviderProbe",
    "ProbeError",
    "HttpProviderProbe",
    "NOT_CONFIGURED",
    "CONNECTED",
    "TwilioProbe",
    "BlandProbe",
    "OpenAIProbe",
    "PersonaProbe",
    "DoorLoopProbe",
    "ResendProbe",
    "PROBE_TYPES",
    "default_probes",
]
