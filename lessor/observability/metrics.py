"""Prometheus metrics for task dispatch and provider health."""

from prometheus_client import Counter, Gauge, Histogram

# Dispatcher metrics
TASKS_PROCESSED = Counter(
    "lessor_tasks_processed_total",
    "Tasks processed by the dispatcher, by terminal outcome",
    labelnames=["outcome", "reason"],
)

DISPATCH_BATCH_LATENCY = Histogram(
    "lessor_dispatch_batch_latency_seconds",
    "Wall time of one dispatcher batch",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

HANDLER_LATENCY = Histogram(
    "lessor_handler_latency_seconds",
    "Action handler execution time",
    labelnames=["agent_key", "action_kind"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# Health metrics
PROVIDER_CHECKS = Counter(
    "lessor_provider_checks_total",
    "Provider health probes executed",
    labelnames=["provider", "healthy"],
)

PROVIDER_PROBE_LATENCY = Histogram(
    "lessor_provider_probe_latency_seconds",
    "Provider probe round-trip time",
    labelnames=["provider"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

PROVIDER_HEALTHY = Gauge(
    "lessor_provider_healthy",
    "Latest health of a provider for an organization (1 healthy, 0 unhealthy)",
    labelnames=["organization_id", "provider"],
)

AGENT_STATUS_TRANSITIONS = Counter(
    "lessor_agent_status_transitions_total",
    "Health-driven agent status transitions",
    labelnames=["from_status", "to_status"],
)
