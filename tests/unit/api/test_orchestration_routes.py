"""Unit tests for the /v1 orchestration endpoints."""

import asyncio
from dataclasses import dataclass, field
from uuid import UUID, uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from lessor.agenda.dispatcher import TaskDispatcher
from lessor.agenda.handlers import HandlerRegistry
from lessor.agenda.human_control import HumanControlService
from lessor.agenda.models import TaskStatus
from lessor.agenda.stores.inmemory import InMemoryTaskStore
from lessor.agents.stores.inmemory import InMemoryAgentStore
from lessor.api.app import _register_exception_handlers
from lessor.api.dependencies import (
    get_activity_logger,
    get_audit_store,
    get_dispatcher,
    get_health_monitor,
    get_health_store,
    get_human_control,
    get_task_store,
)
from lessor.api.routes import create_v1_router
from lessor.audit.logger import AuditActivityLogger
from lessor.audit.models import AuditEvent, AuditStatus
from lessor.audit.stores.inmemory import InMemoryAuditStore
from lessor.db.errors import ConnectionError
from lessor.health.monitor import HealthMonitor
from lessor.health.stores.inmemory import InMemoryCredentialStore, InMemoryProviderHealthStore
from lessor.leads.stores.inmemory import InMemoryLeadStore
from tests.factories import (
    AgentFactory,
    LeadFactory,
    RecordingHandler,
    StubComplianceGate,
    StubProbe,
    TaskFactory,
)


@dataclass
class ApiEnv:
    organization_id: UUID = field(default_factory=uuid4)
    tasks: InMemoryTaskStore = field(default_factory=InMemoryTaskStore)
    leads: InMemoryLeadStore = field(default_factory=InMemoryLeadStore)
    agents: InMemoryAgentStore = field(default_factory=InMemoryAgentStore)
    audit: InMemoryAuditStore = field(default_factory=InMemoryAuditStore)
    health: InMemoryProviderHealthStore = field(default_factory=InMemoryProviderHealthStore)
    handler: RecordingHandler = field(default_factory=RecordingHandler)

    @property
    def activity_logger(self) -> AuditActivityLogger:
        return AuditActivityLogger(self.audit)

    def dispatcher(self) -> TaskDispatcher:
        handlers = HandlerRegistry()
        handlers.register("caller", self.handler)
        return TaskDispatcher(
            task_store=self.tasks,
            lead_store=self.leads,
            agent_store=self.agents,
            compliance_gate=StubComplianceGate(),
            handlers=handlers,
            activity_logger=self.activity_logger,
        )

    def monitor(self) -> HealthMonitor:
        return HealthMonitor(
            probes={"twilio": StubProbe("twilio"), "openai": StubProbe("openai", healthy=False)},
            credential_store=InMemoryCredentialStore(),
            health_store=self.health,
            agent_store=self.agents,
            activity_logger=self.activity_logger,
        )

    def human_control(self) -> HumanControlService:
        return HumanControlService(self.leads, self.tasks, self.activity_logger)


@pytest.fixture
def env() -> ApiEnv:
    return ApiEnv()


@pytest.fixture
def app(env: ApiEnv) -> FastAPI:
    """Create test FastAPI app with in-memory dependencies."""
    app = FastAPI()
    _register_exception_handlers(app)
    app.include_router(create_v1_router())

    app.dependency_overrides[get_task_store] = lambda: env.tasks
    app.dependency_overrides[get_audit_store] = lambda: env.audit
    app.dependency_overrides[get_health_store] = lambda: env.health
    app.dependency_overrides[get_activity_logger] = lambda: env.activity_logger
    app.dependency_overrides[get_dispatcher] = env.dispatcher
    app.dependency_overrides[get_health_monitor] = env.monitor
    app.dependency_overrides[get_human_control] = env.human_control

    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client that returns error responses instead of raising."""
    return TestClient(app, raise_server_exceptions=False)


def seed_lead_with_task(env: ApiEnv, **task_kwargs):
    lead = LeadFactory.create(organization_id=env.organization_id)
    task = TaskFactory.create(
        organization_id=env.organization_id, subject_id=lead.id, **task_kwargs
    )

    async def seed() -> None:
        await env.leads.save(lead)
        await env.tasks.save(task)
        await env.agents.save(AgentFactory.create(organization_id=env.organization_id))

    asyncio.run(seed())
    return lead, task


def stored_task(env: ApiEnv, task_id: UUID):
    return asyncio.run(env.tasks.get(task_id))


class TestDispatcherRun:
    """Tests for POST /v1/dispatcher/run."""

    def test_runs_one_batch(self, client: TestClient, env: ApiEnv) -> None:
        _, task = seed_lead_with_task(env)

        response = client.post("/v1/dispatcher/run")

        assert response.status_code == 200
        data = response.json()
        assert data["dispatched"] == 1
        assert data["results"][0]["task_id"] == str(task.id)
        assert env.handler.calls == [task.id]

    def test_store_outage_is_503(self, app: FastAPI, client: TestClient) -> None:
        class BrokenDispatcher:
            async def run_once(self):
                raise ConnectionError("db down")

        app.dependency_overrides[get_dispatcher] = BrokenDispatcher

        response = client.post("/v1/dispatcher/run")

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "STORE_UNAVAILABLE"


class TestLeadControl:
    """Tests for takeover and release."""

    def test_takeover_pauses_tasks(self, client: TestClient, env: ApiEnv) -> None:
        lead, task = seed_lead_with_task(env, minutes_ago=-60)

        response = client.post(
            f"/v1/leads/{lead.id}/takeover",
            json={"user_id": str(uuid4()), "reason": "tenant called in"},
        )

        assert response.status_code == 200
        assert response.json() == {"lead_id": str(lead.id), "paused_tasks": 1}
        assert stored_task(env, task.id).status == TaskStatus.PAUSED_HUMAN_CONTROL

    def test_release_resumes_tasks(self, client: TestClient, env: ApiEnv) -> None:
        lead, task = seed_lead_with_task(env, minutes_ago=-60)
        client.post(f"/v1/leads/{lead.id}/takeover", json={"user_id": str(uuid4())})

        response = client.post(f"/v1/leads/{lead.id}/release", json={"resume": True})

        assert response.status_code == 200
        assert response.json()["affected_tasks"] == 1
        assert stored_task(env, task.id).status == TaskStatus.PENDING

    def test_takeover_unknown_lead_is_404(self, client: TestClient) -> None:
        response = client.post(
            f"/v1/leads/{uuid4()}/takeover",
            json={"user_id": str(uuid4())},
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "LEAD_NOT_FOUND"

    def test_takeover_requires_user_id(self, client: TestClient) -> None:
        response = client.post(f"/v1/leads/{uuid4()}/takeover", json={})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"


class TestTaskCancel:
    """Tests for POST /v1/tasks/{task_id}/cancel."""

    def test_cancels_pending_task(self, client: TestClient, env: ApiEnv) -> None:
        _, task = seed_lead_with_task(env)

        response = client.post(f"/v1/tasks/{task.id}/cancel", json={"reason": "moved in"})

        assert response.status_code == 200
        assert response.json() == {"task_id": str(task.id), "cancelled": True}
        assert stored_task(env, task.id).status == TaskStatus.CANCELLED

    def test_unknown_task_is_404(self, client: TestClient) -> None:
        response = client.post(f"/v1/tasks/{uuid4()}/cancel", json={})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "TASK_NOT_FOUND"

    def test_completed_task_is_409(self, client: TestClient, env: ApiEnv) -> None:
        _, task = seed_lead_with_task(env, status=TaskStatus.COMPLETED)

        response = client.post(f"/v1/tasks/{task.id}/cancel", json={})

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "TASK_NOT_CANCELLABLE"


class TestOrganizationHealth:
    """Tests for health checks, provider tests, and snapshots."""

    def test_full_health_check(self, client: TestClient, env: ApiEnv) -> None:
        response = client.post(f"/v1/organizations/{env.organization_id}/health-checks")

        assert response.status_code == 200
        services = response.json()["services"]
        assert services["twilio"]["healthy"] is True
        assert services["openai"]["healthy"] is False

    def test_provider_snapshots_after_check(self, client: TestClient, env: ApiEnv) -> None:
        client.post(f"/v1/organizations/{env.organization_id}/health-checks")

        response = client.get(f"/v1/organizations/{env.organization_id}/providers")

        assert [r["provider"] for r in response.json()] == ["openai", "twilio"]

    def test_single_provider(self, client: TestClient, env: ApiEnv) -> None:
        response = client.post(
            f"/v1/organizations/{env.organization_id}/providers/twilio/test"
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Connected"

    def test_unknown_provider_is_404(self, client: TestClient, env: ApiEnv) -> None:
        response = client.post(
            f"/v1/organizations/{env.organization_id}/providers/carrier_pigeon/test"
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PROVIDER_NOT_FOUND"


class TestActivity:
    """Tests for GET /v1/organizations/{id}/activity."""

    def test_filters_by_action(self, client: TestClient, env: ApiEnv) -> None:
        async def seed() -> None:
            for action in ("task_dispatched", "task_failed", "task_dispatched"):
                await env.audit.save_event(
                    AuditEvent(
                        organization_id=env.organization_id,
                        actor_key="dispatcher",
                        action=action,
                        status=AuditStatus.SUCCESS,
                    )
                )

        asyncio.run(seed())

        response = client.get(
            f"/v1/organizations/{env.organization_id}/activity",
            params={"action": "task_dispatched"},
        )

        data = response.json()
        assert response.status_code == 200
        assert data["count"] == 2
        assert {e["action"] for e in data["events"]} == {"task_dispatched"}

    def test_limit_is_bounded(self, client: TestClient, env: ApiEnv) -> None:
        response = client.get(
            f"/v1/organizations/{env.organization_id}/activity",
            params={"limit": 0},
        )

        assert response.status_code == 400
