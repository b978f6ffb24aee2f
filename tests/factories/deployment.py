"""Wiring for multi-component scenarios over in-memory stores."""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4


from lessor.agenda.dispatcher import TaskDispatcher
from lessor.agenda.handlers import HandlerRegistry
from lessor.agenda.human_control import HumanControlService
from lessor.agenda.models import Task
from lessor.agenda.stores.inmemory import InMemoryTaskStore
from lessor.agents.models import Agent
from lessor.agents.stores.inmemory import InMemoryAgentStore
from lessor.audit.logger import AuditActivityLogger
from lessor.audit.stores.inmemory import InMemoryAuditStore
from lessor.config.models.dispatcher import DispatcherConfig
from lessor.config.models.health import HealthConfig
from lessor.health.monitor import HealthMonitor
from lessor.health.stores.inmemory import InMemoryCredentialStore, InMemoryProviderHealthStore
from lessor.leads.models import Lead
from lessor.leads.stores.inmemory import InMemoryLeadStore
from tests.factories.orchestration import (
    AgentFactory,
    LeadFactory,
    RecordingHandler,
    StubComplianceGate,
    StubProbe,
    TaskFactory,
)


@dataclass
class Deployment:
    """One organization with every component wired to shared stores."""

    organization_id: UUID = field(default_factory=uuid4)
    tasks: InMemoryTaskStore = field(default_factory=InMemoryTaskStore)
    leads: InMemoryLeadStore = field(default_factory=InMemoryLeadStore)
    agents: InMemoryAgentStore = field(default_factory=InMemoryAgentStore)
    audit: InMemoryAuditStore = field(default_factory=InMemoryAuditStore)
    health: InMemoryProviderHealthStore = field(default_factory=InMemoryProviderHealthStore)
    credentials: InMemoryCredentialStore = field(default_factory=InMemoryCredentialStore)
    handlers: HandlerRegistry = field(default_factory=HandlerRegistry)
    gate: StubComplianceGate = field(default_factory=StubComplianceGate)
    probes: dict[str, StubProbe] = field(
        default_factory=lambda: {name: StubProbe(name) for name in ("twilio", "openai", "resend")}
    )

    @property
    def activity_logger(self) -> AuditActivityLogger:
        return AuditActivityLogger(self.audit)

    def dispatcher(self, **config: Any) -> TaskDispatcher:
        return TaskDispatcher(
            task_store=self.tasks,
            lead_store=self.leads,
            agent_store=self.agents,
            compliance_gate=self.gate,
            handlers=self.handlers,
            activity_logger=self.activity_logger,
            config=DispatcherConfig(**config),
        )

    def monitor(self) -> HealthMonitor:
        return HealthMonitor(
            probes=self.probes,
            credential_store=self.credentials,
            health_store=self.health,
            agent_store=self.agents,
            activity_logger=self.activity_logger,
            config=HealthConfig(probe_timeout_seconds=1.0),
        )

    def human_control(self) -> HumanControlService:
        return HumanControlService(self.leads, self.tasks, self.activity_logger)

    async def add_lead(self, **kwargs: Any) -> Lead:
        lead = LeadFactory.create(organization_id=self.organization_id, **kwargs)
        await self.leads.save(lead)
        return lead

    async def add_agent(self, handler: RecordingHandler, **kwargs: Any) -> Agent:
        agent = AgentFactory.create(organization_id=self.organization_id, **kwargs)
        await self.agents.save(agent)
        self.handlers.register(agent.agent_key, handler)
        return agent

    async def add_task(self, lead: Lead, **kwargs: Any) -> Task:
        task = TaskFactory.create(
            organization_id=self.organization_id,
            subject_id=lead.id,
            **kwargs,
        )
        await self.tasks.save(task)
        return task

    def actions(self, action: str) -> list[Any]:
        return [e for e in self.audit.events if e.action == action]
