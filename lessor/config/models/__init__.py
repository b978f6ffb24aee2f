"""Configuration model exports.

    from lessor.config.models import DispatcherConfig, HealthConfig
"""

from lessor.config.models.api import APIConfig
from lessor.config.models.compliance import CompliancePolicy
from lessor.config.models.dispatcher import DispatcherConfig
from lessor.config.models.health import DEFAULT_PROVIDERS, HealthConfig
from lessor.config.models.jobs import HatchetConfig, JobsConfig, SchedulerConfig
from lessor.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from lessor.config.models.storage import StorageConfig

__all__ = [
    "APIConfig",
    "CompliancePolicy",
    "DispatcherConfig",
    "DEFAULT_PROVIDERS",
    "HealthConfig",
    "HatchetConfig",
    "JobsConfig",
    "SchedulerConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "StorageConfig",
]
