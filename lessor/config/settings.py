"""Root settings model for Lessor configuration."""

from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from lessor.config.models.api import APIConfig
from lessor.config.models.compliance import CompliancePolicy
from lessor.config.models.dispatcher import DispatcherConfig
from lessor.config.models.health import HealthConfig
from lessor.config.models.jobs import JobsConfig
from lessor.config.models.observability import ObservabilityConfig
from lessor.config.models.storage import StorageConfig

# Module-level variable to store TOML config for settings source
_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Set the TOML configuration to be used by Settings."""
    global _toml_config
    _toml_config = config


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that reads from TOML configuration."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return _toml_config.copy()


class Settings(BaseSettings):
    """Root configuration object containing all nested configuration sections.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml (base configuration)
    3. config/{LESSOR_ENV}.toml (environment overrides)
    4. LESSOR_* environment variables (runtime overrides)
    """

    model_config = SettingsConfigDict(
        env_prefix="LESSOR_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="lessor", description="Application name for logging")
    debug: bool = Field(default=False, description="Enable debug mode")

    api: APIConfig = Field(default_factory=APIConfig, description="API server configuration")
    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Storage backend configuration",
    )
    dispatcher: DispatcherConfig = Field(
        default_factory=DispatcherConfig,
        description="Task dispatcher configuration",
    )
    health: HealthConfig = Field(
        default_factory=HealthConfig,
        description="Provider health monitor configuration",
    )
    compliance: CompliancePolicy = Field(
        default_factory=CompliancePolicy,
        description="Default compliance policy",
    )
    jobs: JobsConfig = Field(
        default_factory=JobsConfig,
        description="Background job configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include TOML config.

        Priority order (highest to lowest):
        1. init_settings (constructor arguments)
        2. env_settings (LESSOR_* environment variables)
        3. toml_settings (config/*.toml files)
        4. (defaults from model)
        """
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )
