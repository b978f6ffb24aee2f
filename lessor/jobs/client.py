"""Hatchet client wrapper.

Provides a centralized client for Hatchet job orchestration
with graceful degradation when Hatchet is unavailable.
"""

from typing import Any

from lessor.config.models.jobs import HatchetConfig
from lessor.observability.logging import get_logger

logger = get_logger(__name__)


class HatchetClient:
    """Wrapper for the Hatchet SDK client.

    The SDK is an optional extra. When it is missing, disabled in
    configuration, or fails to initialise, get_client returns None and
    the in-process scheduler is the only way the jobs run.
    """

    def __init__(self, config: HatchetConfig) -> None:
        self._config = config
        self._client: Any | None = None
        self._available: bool | None = None

    def _get_or_create_client(self) -> Any | None:
        if self._client is not None:
            return self._client

        if not self._config.enabled:
            logger.info("hatchet_disabled", reason="config")
            self._available = False
            return None

        try:
            from hatchet_sdk import Hatchet
        except ImportError:
            logger.warning("hatchet_sdk_not_installed")
            self._available = False
            return None

        try:
            api_key = self._config.api_key.get_secret_value() if self._config.api_key else None
            self._client = Hatchet(server_url=self._config.server_url, api_key=api_key)
        except Exception as e:
            logger.error("hatchet_client_init_failed", error=str(e))
            self._available = False
            return None

        self._available = True
        logger.info("hatchet_client_initialized", server_url=self._config.server_url)
        return self._client

    def get_client(self) -> Any | None:
        """Get the Hatchet instance, or None if unavailable."""
        return self._get_or_create_client()

    @property
    def is_available(self) -> bool:
        """Whether the last initialisation attempt produced a client."""
        return bool(self._available)

    @property
    def config(self) -> HatchetConfig:
        return self._config
