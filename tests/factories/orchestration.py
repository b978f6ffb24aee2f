"""Test factories for leads, agents, tasks, and their collaborators."""

import asyncio
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

from lessor.agenda.handlers import ActionHandler, HandlerOutcome
from lessor.agenda.models import Task, TaskStatus
from lessor.agents.models import Agent, AgentStatus
from lessor.compliance.gate import ComplianceGate
from lessor.compliance.models import ComplianceResult, ComplianceViolation
from lessor.health.models import ProviderCredentials, ProviderHealthResult
from lessor.health.probes.base import ProviderProbe
from lessor.leads.models import Lead


class LeadFactory:
    """Factory for creating Lead instances for testing."""

    @staticmethod
    def create(
        *,
        organization_id: UUID,
        id: UUID | None = None,
        first_name: str = "Dana",
        last_name: str = "Reyes",
        do_not_contact: bool = False,
        sms_consent: bool = True,
        call_consent: bool = True,
        is_human_controlled: bool = False,
        human_controlled_by: UUID | None = None,
    ) -> Lead:
        return Lead(
            id=id or uuid4(),
            organization_id=organization_id,
            first_name=first_name,
            last_name=last_name,
            do_not_contact=do_not_contact,
            sms_consent=sms_consent,
            call_consent=call_consent,
            is_human_controlled=is_human_controlled,
            human_controlled_by=human_controlled_by,
        )


class AgentFactory:
    """Factory for creating Agent instances for testing."""

    @staticmethod
    def create(
        *,
        organization_id: UUID,
        agent_key: str = "caller",
        required_providers: list[str] | None = None,
        is_enabled: bool = True,
        status: AgentStatus = AgentStatus.IDLE,
        last_error_message: str | None = None,
    ) -> Agent:
        return Agent(
            organization_id=organization_id,
            agent_key=agent_key,
            display_name=agent_key.title(),
            required_providers=required_providers or [],
            is_enabled=is_enabled,
            status=status,
            last_error_message=last_error_message,
        )


class TaskFactory:
    """Factory for creating Task instances for testing."""

    @staticmethod
    def create(
        *,
        organization_id: UUID,
        subject_id: UUID,
        agent_key: str = "caller",
        action_kind: str = "email",
        scheduled_for: datetime | None = None,
        minutes_ago: int = 5,
        status: TaskStatus = TaskStatus.PENDING,
        payload: dict[str, Any] | None = None,
    ) -> Task:
        return Task(
            organization_id=organization_id,
            subject_id=subject_id,
            agent_key=agent_key,
            action_kind=action_kind,
            scheduled_for=scheduled_for or datetime.now(UTC) - timedelta(minutes=minutes_ago),
            status=status,
            payload=payload or {},
        )


class RecordingHandler(ActionHandler):
    """Handler that records every invocation.

    Args:
        outcome: Returned from handle; defaults to success
        delay: Seconds to sleep before returning
        error: Raised from handle instead of returning
    """

    def __init__(
        self,
        outcome: HandlerOutcome | None = None,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.outcome = outcome or HandlerOutcome(success=True, detail={"sent": True}, cost=0.02)
        self.delay = delay
        self.error = error
        self.calls: list[UUID] = []

    async def handle(self, task: Task, lead: Lead, agent: Agent) -> HandlerOutcome:
        self.calls.append(task.id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.outcome


class StubComplianceGate(ComplianceGate):
    """Gate returning a fixed set of violations, or raising."""

    def __init__(
        self,
        violations: list[ComplianceViolation] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.violations = violations or []
        self.error = error
        self.delay = delay
        self.calls = 0

    async def check(
        self,
        organization_id: UUID,
        subject_id: UUID,
        action_kind: str,
        agent_key: str,
    ) -> ComplianceResult:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return ComplianceResult.from_violations(list(self.violations))


class StubProbe(ProviderProbe):
    """Probe with a scripted answer.

    healthy may be flipped between runs to simulate outages.
    """

    def __init__(
        self,
        name: str,
        healthy: bool = True,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self._name = name
        self.healthy = healthy
        self.error = error
        self.delay = delay
        self.calls = 0

    @property
    def provider(self) -> str:
        return self._name

    async def check(
        self,
        organization_id: UUID,
        credentials: ProviderCredentials,
    ) -> ProviderHealthResult:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return ProviderHealthResult(
            provider=self._name,
            healthy=self.healthy,
            message="Connected" if self.healthy else "Error: 503",
            latency_ms=1,
        )
