"""Provider health check workflow.

Scheduled job that runs a full health check per organization. Runs
every five minutes by default. Without an organization_id it checks
every organization that has enabled agents.
"""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from lessor.agents.store import AgentStore
from lessor.health.monitor import HealthMonitor
from lessor.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CheckHealthInput:
    """Input for the health check workflow."""

    organization_id: str | None = None  # None = all organizations


@dataclass
class CheckHealthOutput:
    """Output from the health check workflow."""

    organizations_checked: int
    agents_affected: int
    success: bool
    errors: dict[str, str] = field(default_factory=dict)
    error: str | None = None


class CheckProviderHealthWorkflow:
    """Workflow wrapper around HealthMonitor.check_all.

    One organization's failure does not stop the others; it is reported
    in `errors` and the run is marked unsuccessful.
    """

    WORKFLOW_NAME = "check-provider-health"
    CRON_SCHEDULE = "*/5 * * * *"  # Every 5 minutes

    def __init__(self, monitor: HealthMonitor, agent_store: AgentStore) -> None:
        self._monitor = monitor
        self._agents = agent_store

    async def run(self, input_data: CheckHealthInput) -> CheckHealthOutput:
        if input_data.organization_id:
            try:
                organization_ids = [UUID(input_data.organization_id)]
            except ValueError:
                return CheckHealthOutput(
                    organizations_checked=0,
                    agents_affected=0,
                    success=False,
                    error=f"Invalid organization_id: {input_data.organization_id}",
                )
        else:
            try:
                organization_ids = await self._agents.list_organization_ids()
            except Exception as e:
                logger.error("check_provider_health_list_failed", error=str(e))
                return CheckHealthOutput(
                    organizations_checked=0,
                    agents_affected=0,
                    success=False,
                    error=str(e),
                )

        checked = 0
        affected = 0
        errors: dict[str, str] = {}
        for organization_id in organization_ids:
            try:
                report = await self._monitor.check_all(organization_id)
            except Exception as e:
                errors[str(organization_id)] = str(e)
                continue
            checked += 1
            affected += report.agents_affected

        logger.info(
            "provider_health_checked",
            organizations_checked=checked,
            agents_affected=affected,
            failed_organizations=len(errors),
        )
        return CheckHealthOutput(
            organizations_checked=checked,
            agents_affected=affected,
            success=not errors,
            errors=errors,
        )


def register_workflow(
    hatchet: Any,
    monitor: HealthMonitor,
    agent_store: AgentStore,
    cron: str | None = None,
) -> Any:
    """Register the health check workflow with Hatchet.

    Args:
        hatchet: Hatchet SDK instance
        monitor: Health monitor the workflow drives
        agent_store: Source of organizations to check
        cron: Override for the default schedule

    Returns:
        Registered workflow
    """
    workflow_instance = CheckProviderHealthWorkflow(monitor, agent_store)

    @hatchet.workflow(
        name=CheckProviderHealthWorkflow.WORKFLOW_NAME,
        on_crons=[cron or CheckProviderHealthWorkflow.CRON_SCHEDULE],
    )
    class HatchetCheckProviderHealthWorkflow:
        """Hatchet workflow wrapper for provider health checks."""

        @hatchet.step(retries=1, retry_delay="30s")
        async def check_health(self, context: Any) -> dict:
            """Execute the health check step."""
            input_data = context.workflow_input() or {}
            result = await workflow_instance.run(
                CheckHealthInput(organization_id=input_data.get("organization_id"))
            )
            return {
                "organizations_checked": result.organizations_checked,
                "agents_affected": result.agents_affected,
                "success": result.success,
                "errors": result.errors,
                "error": result.error,
            }

    return HatchetCheckProviderHealthWorkflow
