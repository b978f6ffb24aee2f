"""Concrete probes for the providers agents depend on."""

import os
from typing import Any

import httpx

from lessor.health.models import ProviderCredentials
from lessor.health.probes.base import ProviderProbe
from lessor.health.probes.http import HttpProviderProbe


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TwilioProbe(HttpProviderProbe):
    """Fetches the account record with basic auth."""

    BASE_URL = "https://api.twilio.com/2010-04-01/Accounts"

    @property
    def provider(self) -> str:
        return "twilio"

    def build_request(self, credentials: ProviderCredentials) -> dict[str, Any] | None:
        sid = credentials.secret("twilio_account_sid")
        token = credentials.secret("twilio_auth_token")
        if not sid or not token:
            return None
        return {"url": f"{self.BASE_URL}/{sid}.json", "auth": (sid, token)}


class BlandProbe(HttpProviderProbe):
    """Lists voice agents. Bland expects the raw key in Authorization."""

    BASE_URL = "https://api.bland.ai/v1/agents"

    @property
    def provider(self) -> str:
        return "bland_ai"

    def build_request(self, credentials: ProviderCredentials) -> dict[str, Any] | None:
        key = credentials.secret("bland_api_key")
        if not key:
            return None
        return {"url": self.BASE_URL, "headers": {"Authorization": key}}


class OpenAIProbe(HttpProviderProbe):
    """Lists models."""

    BASE_URL = "https://api.openai.com/v1/models"

    @property
    def provider(self) -> str:
        return "openai"

    def build_request(self, credentials: ProviderCredentials) -> dict[str, Any] | None:
        key = credentials.secret("openai_api_key")
        if not key:
            return None
        return {"url": self.BASE_URL, "headers": _bearer(key)}


class PersonaProbe(HttpProviderProbe):
    """Lists a single inquiry."""

    BASE_URL = "https://withpersona.com/api/v1/inquiries"
    API_VERSION = "2023-01-05"

    @property
    def provider(self) -> str:
        return "persona"

    def build_request(self, credentials: ProviderCredentials) -> dict[str, Any] | None:
        key = credentials.secret("persona_api_key")
        if not key:
            return None
        return {
            "url": self.BASE_URL,
            "params": {"page[size]": "1"},
            "headers": {**_bearer(key), "Persona-Version": self.API_VERSION},
        }


class DoorLoopProbe(HttpProviderProbe):
    """Lists a single property."""

    BASE_URL = "https://api.doorloop.com/api/v1/properties"

    @property
    def provider(self) -> str:
        return "doorloop"

    def build_request(self, credentials: ProviderCredentials) -> dict[str, Any] | None:
        key = credentials.secret("doorloop_api_key")
        if not key:
            return None
        return {"url": self.BASE_URL, "params": {"$top": "1"}, "headers": _bearer(key)}


class ResendProbe(HttpProviderProbe):
    """Lists sending domains.

    Falls back to the platform key (RESEND_API_KEY) when the organization
    has none of its own.
    """

    BASE_URL = "https://api.resend.com/domains"

    def __init__(self, client: httpx.AsyncClient, platform_api_key: str | None = None) -> None:
        super().__init__(client)
        self._platform_api_key = platform_api_key or os.environ.get("RESEND_API_KEY")

    @property
    def provider(self) -> str:
        return "resend"

    def build_request(self, credentials: ProviderCredentials) -> dict[str, Any] | None:
        key = credentials.secret("resend_api_key") or self._platform_api_key
        if not key:
            return None
        return {"url": self.BASE_URL, "headers": _bearer(key)}


PROBE_TYPES: dict[str, type[HttpProviderProbe]] = {
    "twilio": TwilioProbe,
    "bland_ai": BlandProbe,
    "openai": OpenAIProbe,
    "persona": PersonaProbe,
    "doorloop": DoorLoopProbe,
    "resend": ResendProbe,
}


def default_probes(
    client: httpx.AsyncClient,
    providers: list[str] | None = None,
) -> dict[str, ProviderProbe]:
    """Build HTTP probes for the given providers.

    Raises:
        ValueError: If a provider has no probe implementation
    """
    names = providers if providers is not None else list(PROBE_TYPES)
    unknown = [name for name in names if name not in PROBE_TYPES]
    if unknown:
        raise ValueError(f"No probe for providers: {', '.join(unknown)}")
    return {name: PROBE_TYPES[name](client) for name in names}
