"""Provider health monitor: agent-level circuit breaker.

check_all probes every provider for an organization in parallel,
persists the latest snapshot per provider, and moves each enabled agent
between idle and degraded according to the health of its required
providers. Nothing else about an agent's status is ever changed here:
disabled and error belong to operators.
"""

import asyncio
import time
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from structlog.contextvars import bound_contextvars

from lessor.agents.models import Agent, AgentStatus, health_transition
from lessor.agents.store import AgentStore
from lessor.audit.logger import ActivityLogger
from lessor.audit.models import AuditEvent, AuditStatus
from lessor.config.models.health import HealthConfig
from lessor.health.models import HealthReport, ProviderCredentials, ProviderHealthResult
from lessor.health.probes.base import ProbeError, ProviderProbe
from lessor.health.store import CredentialStore, ProviderHealthStore
from lessor.observability.logging import get_logger
from lessor.observability.metrics import (
    AGENT_STATUS_TRANSITIONS,
    PROVIDER_CHECKS,
    PROVIDER_HEALTHY,
    PROVIDER_PROBE_LATENCY,
)

logger = get_logger(__name__)

ACTOR_KEY = "health_monitor"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class HealthMonitor:
    """Runs provider probes and applies health-driven agent transitions."""

    def __init__(
        self,
        probes: dict[str, ProviderProbe],
        credential_store: CredentialStore,
        health_store: ProviderHealthStore,
        agent_store: AgentStore,
        activity_logger: ActivityLogger,
        config: HealthConfig | None = None,
    ) -> None:
        self._probes = dict(probes)
        self._credentials = credential_store
        self._health = health_store
        self._agents = agent_store
        self._activity = activity_logger
        self._config = config or HealthConfig()

    @property
    def providers(self) -> list[str]:
        return list(self._probes)

    async def check_all(self, organization_id: UUID) -> HealthReport:
        """Probe every provider and update agent status for one organization.

        Probe failures and timeouts become unhealthy results and never
        raise.

        Raises:
            StoreError: If credentials, snapshots, or agents cannot be
                read or written. Logged and recorded before propagating.
        """
        run_id = uuid4()
        started = time.perf_counter()

        with bound_contextvars(health_run_id=str(run_id), organization_id=str(organization_id)):
            try:
                credentials = await self._credentials.get_credentials(organization_id)
                services = await self._probe_all(organization_id, credentials)
                for result in services.values():
                    await self._persist(organization_id, result)

                agents = await self._agents.list_enabled(organization_id)
                affected = 0
                for agent in agents:
                    if await self._apply_transition(agent, services):
                        affected += 1
            except Exception as e:
                logger.exception("health_check_failed", error=str(e))
                await self._record(
                    organization_id=organization_id,
                    action="health_check_error",
                    status=AuditStatus.FAILURE,
                    message=f"Health check failed: {e}",
                    details={"error": str(e), "error_type": type(e).__name__},
                    execution_ms=_elapsed_ms(started),
                )
                raise

            report = HealthReport(
                organization_id=organization_id,
                services=services,
                agents_affected=affected,
                execution_ms=_elapsed_ms(started),
            )
            healthy = [p for p, r in services.items() if r.healthy]
            await self._record(
                organization_id=organization_id,
                action="full_health_check",
                status=AuditStatus.SUCCESS if report.all_healthy else AuditStatus.FAILURE,
                message=(
                    f"Health check: {len(healthy)}/{len(services)} services healthy, "
                    f"{affected} agents affected"
                ),
                details={
                    "run_id": str(run_id),
                    "services": {
                        p: {"healthy": r.healthy, "message": r.message}
                        for p, r in services.items()
                    },
                    "healthy_services": healthy,
                    "unhealthy_services": report.unhealthy_providers,
                    "agents_affected": affected,
                },
                execution_ms=report.execution_ms,
            )
            logger.info(
                "health_check_complete",
                healthy=len(healthy),
                total=len(services),
                agents_affected=affected,
                execution_ms=report.execution_ms,
            )
            return report

    async def check_one(self, organization_id: UUID, provider: str) -> ProviderHealthResult:
        """Probe a single provider without touching agent status.

        Raises:
            ProbeError: If no probe is registered for the provider
        """
        if provider not in self._probes:
            raise ProbeError(provider, "No probe registered")

        with bound_contextvars(organization_id=str(organization_id)):
            credentials = await self._credentials.get_credentials(organization_id)
            result = await self._run_probe(
                organization_id,
                self._probes[provider],
                credentials,
                asyncio.Semaphore(1),
            )
            await self._persist(organization_id, result)
            logger.info("provider_tested", provider=provider, healthy=result.healthy)
            return result

    async def _probe_all(
        self,
        organization_id: UUID,
        credentials: ProviderCredentials,
    ) -> dict[str, ProviderHealthResult]:
        semaphore = asyncio.Semaphore(self._config.max_concurrency)
        results = await asyncio.gather(
            *(
                self._run_probe(organization_id, probe, credentials, semaphore)
                for probe in self._probes.values()
            )
        )
        return {result.provider: result for result in results}

    async def _run_probe(
        self,
        organization_id: UUID,
        probe: ProviderProbe,
        credentials: ProviderCredentials,
        semaphore: asyncio.Semaphore,
    ) -> ProviderHealthResult:
        timeout = self._config.probe_timeout_seconds
        async with semaphore:
            started = time.perf_counter()
            try:
                result = await asyncio.wait_for(
                    probe.check(organization_id, credentials),
                    timeout=timeout,
                )
            except TimeoutError:
                result = ProviderHealthResult(
                    provider=probe.provider,
                    healthy=False,
                    message=f"Error: timed out after {timeout}s",
                    latency_ms=_elapsed_ms(started),
                )
            except ProbeError as e:
                result = ProviderHealthResult(
                    provider=probe.provider,
                    healthy=False,
                    message=f"Error: {e.message}",
                    latency_ms=_elapsed_ms(started),
                )
            except Exception as e:
                logger.warning(
                    "provider_probe_crashed",
                    provider=probe.provider,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                result = ProviderHealthResult(
                    provider=probe.provider,
                    healthy=False,
                    message=f"Error: {e}",
                    latency_ms=_elapsed_ms(started),
                )
            PROVIDER_PROBE_LATENCY.labels(provider=probe.provider).observe(
                time.perf_counter() - started
            )

        PROVIDER_CHECKS.labels(
            provider=result.provider,
            healthy=str(result.healthy).lower(),
        ).inc()
        logger.debug(
            "provider_probed",
            provider=result.provider,
            healthy=result.healthy,
            message=result.message,
            latency_ms=result.latency_ms,
        )
        return result

    async def _persist(self, organization_id: UUID, result: ProviderHealthResult) -> None:
        await self._health.upsert(organization_id, result)
        PROVIDER_HEALTHY.labels(
            organization_id=str(organization_id),
            provider=result.provider,
        ).set(1 if result.healthy else 0)
        await self._record(
            organization_id=organization_id,
            action="provider_check",
            status=AuditStatus.SUCCESS if result.healthy else AuditStatus.FAILURE,
            message=f"{result.provider}: {result.message}",
            details={
                "provider": result.provider,
                "healthy": result.healthy,
                "message": result.message,
                "latency_ms": result.latency_ms,
            },
            execution_ms=result.latency_ms or 0,
        )

    async def _apply_transition(
        self,
        agent: Agent,
        services: dict[str, ProviderHealthResult],
    ) -> bool:
        if not agent.required_providers:
            return False

        healthy = {provider: result.healthy for provider, result in services.items()}
        unhealthy = agent.unhealthy_providers(healthy)
        target = health_transition(agent.status, all_healthy=not unhealthy)
        if target is None:
            return False

        if target == AgentStatus.DEGRADED:
            message = f"Degraded due to unhealthy services: {', '.join(unhealthy)}"
            fields: dict[str, Any] = {
                "last_error_message": message,
                "last_error_at": datetime.now(UTC),
            }
        else:
            message = "Restored: all required services healthy"
            fields = {"last_error_message": None, "last_error_at": None}

        applied = await self._agents.update_status(
            agent.id,
            target,
            expected_status=agent.status,
            **fields,
        )
        if not applied:
            # Status moved since it was read; the next run sees the new value
            logger.info(
                "agent_status_changed_concurrently",
                agent_key=agent.agent_key,
                expected_status=agent.status.value,
            )
            return False

        AGENT_STATUS_TRANSITIONS.labels(
            from_status=agent.status.value,
            to_status=target.value,
        ).inc()
        logger.info(
            "agent_status_changed",
            agent_key=agent.agent_key,
            old_status=agent.status.value,
            new_status=target.value,
            unhealthy_services=unhealthy,
        )
        await self._record(
            organization_id=agent.organization_id,
            action="agent_status_changed",
            status=AuditStatus.FAILURE if target == AgentStatus.DEGRADED else AuditStatus.SUCCESS,
            message=f"{agent.display_name or agent.agent_key}: {message}",
            details={
                "agent_key": agent.agent_key,
                "old_status": agent.status.value,
                "new_status": target.value,
                "required_services": list(agent.required_providers),
                "unhealthy_services": unhealthy,
            },
        )
        return True

    async def _record(
        self,
        *,
        organization_id: UUID,
        action: str,
        status: AuditStatus,
        message: str,
        details: dict[str, Any],
        execution_ms: int = 0,
    ) -> None:
        event = AuditEvent(
            organization_id=organization_id,
            actor_key=ACTOR_KEY,
            action=action,
            status=status,
            message=message,
            details=details,
            execution_ms=execution_ms,
        )
        try:
            await self._activity.append(event)
        except Exception as e:
            logger.warning("audit_append_failed", action=action, error=str(e))
