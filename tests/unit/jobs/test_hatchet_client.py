"""Unit tests for HatchetClient."""

from lessor.config.models.jobs import HatchetConfig
from lessor.jobs.client import HatchetClient


class TestHatchetClient:
    """Tests for graceful degradation when Hatchet is off."""

    def test_disabled_returns_none(self):
        client = HatchetClient(HatchetConfig(enabled=False))

        assert client.get_client() is None
        assert client.is_available is False

    def test_not_available_before_first_use(self):
        client = HatchetClient(HatchetConfig())

        assert client.is_available is False

    def test_exposes_config(self):
        config = HatchetConfig(worker_concurrency=2)

        assert HatchetClient(config).config.worker_concurrency == 2
