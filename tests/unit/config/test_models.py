"""Unit tests for configuration section models."""

from datetime import time

import pytest
from pydantic import ValidationError

from lessor.config.models.compliance import CompliancePolicy
from lessor.config.models.dispatcher import DispatcherConfig
from lessor.config.models.health import HealthConfig
from lessor.config.models.storage import LOCAL_DATABASE_URL, StorageConfig
from lessor.config.settings import Settings, set_toml_config


class TestDispatcherConfig:
    def test_batch_size_bounds(self) -> None:
        with pytest.raises(ValidationError):
            DispatcherConfig(batch_size=0)
        with pytest.raises(ValidationError):
            DispatcherConfig(batch_size=501)

    def test_timeouts_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            DispatcherConfig(handler_timeout_seconds=0)


class TestHealthConfig:
    def test_interval_floor(self) -> None:
        with pytest.raises(ValidationError):
            HealthConfig(interval_seconds=5)

    def test_providers_default_is_not_shared(self) -> None:
        first = HealthConfig()
        first.providers.append("extra")

        assert "extra" not in HealthConfig().providers


class TestStorageConfig:
    def test_unknown_backend_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StorageConfig(backend="redis")

    def test_connection_url_wins_over_platform_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgresql://platform/db")

        storage = StorageConfig(connection_url="postgresql://configured/db")

        assert storage.database_url == "postgresql://configured/db"

    def test_platform_url_then_local_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)
        assert StorageConfig().database_url == LOCAL_DATABASE_URL

        monkeypatch.setenv("DATABASE_URL", "postgresql://platform/db")
        assert StorageConfig().database_url == "postgresql://platform/db"

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("postgresql://u:p@db/lessor", "postgresql+asyncpg://u:p@db/lessor"),
            ("postgres://u:p@db/lessor", "postgresql+asyncpg://u:p@db/lessor"),
            ("postgresql+asyncpg://db/lessor", "postgresql+asyncpg://db/lessor"),
        ],
    )
    def test_migration_url_uses_asyncpg_driver(self, url: str, expected: str) -> None:
        assert StorageConfig(connection_url=url).migration_url == expected

    def test_env_override_reaches_pool_and_migrations(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("LESSOR_STORAGE__CONNECTION_URL", "postgresql://u:p@prod-db/lessor")
        set_toml_config({})

        storage = Settings().storage

        assert storage.database_url == "postgresql://u:p@prod-db/lessor"
        assert storage.migration_url == "postgresql+asyncpg://u:p@prod-db/lessor"


class TestCompliancePolicy:
    def test_parses_time_strings(self) -> None:
        policy = CompliancePolicy(working_hours_start="08:30", working_hours_end="18:00")

        assert policy.working_hours_start == time(8, 30)
        assert policy.working_hours_end == time(18, 0)

    def test_rejects_unknown_timezone(self) -> None:
        with pytest.raises(ValidationError, match="Unknown timezone"):
            CompliancePolicy(timezone="Mars/Olympus_Mons")

    def test_rejects_out_of_range_weekday(self) -> None:
        with pytest.raises(ValidationError):
            CompliancePolicy(working_days=[0, 1])
