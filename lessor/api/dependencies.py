"""Dependency injection for API routes and workers.

Stores, services, and the dispatcher/monitor are created once per
process and shared. The backend is chosen by settings.storage.backend;
all stores share one PostgreSQL pool so compare-and-set updates stay
single-row in a single database. Routes can override any of these with
FastAPI's dependency_overrides in tests.
"""

from typing import Annotated

import httpx
from fastapi import Depends

from lessor.agenda.dispatcher import TaskDispatcher
from lessor.agenda.handlers import HandlerRegistry
from lessor.agenda.human_control import HumanControlService
from lessor.agenda.store import TaskStore
from lessor.agenda.stores.inmemory import InMemoryTaskStore
from lessor.agenda.stores.postgres import PostgresTaskStore
from lessor.agents.store import AgentStore
from lessor.agents.stores.inmemory import InMemoryAgentStore
from lessor.agents.stores.postgres import PostgresAgentStore
from lessor.audit.logger import ActivityLogger, AuditActivityLogger
from lessor.audit.store import AuditStore
from lessor.audit.stores.inmemory import InMemoryAuditStore
from lessor.audit.stores.postgres import PostgresAuditStore
from lessor.compliance.gate import ComplianceGate
from lessor.compliance.rules import RuleBasedComplianceGate
from lessor.config import get_settings
from lessor.config.settings import Settings
from lessor.db.pool import PostgresPool
from lessor.health.monitor import HealthMonitor
from lessor.health.probes.providers import default_probes
from lessor.health.store import CredentialStore, ProviderHealthStore
from lessor.health.stores.inmemory import InMemoryCredentialStore, InMemoryProviderHealthStore
from lessor.health.stores.postgres import PostgresCredentialStore, PostgresProviderHealthStore
from lessor.leads.store import LeadStore
from lessor.leads.stores.inmemory import InMemoryLeadStore
from lessor.leads.stores.postgres import PostgresLeadStore
from lessor.observability.logging import get_logger

logger = get_logger(__name__)

# Shared clients
_postgres_pool: PostgresPool | None = None
_http_client: httpx.AsyncClient | None = None

# Store instances - created once and reused
_task_store: TaskStore | None = None
_lead_store: LeadStore | None = None
_agent_store: AgentStore | None = None
_audit_store: AuditStore | None = None
_health_store: ProviderHealthStore | None = None
_credential_store: CredentialStore | None = None

# Services
_handler_registry: HandlerRegistry | None = None
_dispatcher: TaskDispatcher | None = None
_health_monitor: HealthMonitor | None = None
_human_control: HumanControlService | None = None


def _use_postgres() -> bool:
    return get_settings().storage.backend == "postgres"


async def get_postgres_pool() -> PostgresPool:
    """Get the shared PostgreSQL connection pool, connecting on first access."""
    global _postgres_pool
    if _postgres_pool is None:
        settings = get_settings()
        _postgres_pool = PostgresPool.from_config(
            settings.storage,
            application_name=settings.app_name,
        )
        await _postgres_pool.connect()
    return _postgres_pool


def get_http_client() -> httpx.AsyncClient:
    """Get the shared HTTP client used by provider probes."""
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(timeout=get_settings().health.probe_timeout_seconds)
    return _http_client


async def get_task_store() -> TaskStore:
    global _task_store
    if _task_store is None:
        if _use_postgres():
            _task_store = PostgresTaskStore(await get_postgres_pool())
        else:
            _task_store = InMemoryTaskStore()
        logger.info("task_store_initialized", store_type=type(_task_store).__name__)
    return _task_store


async def get_lead_store() -> LeadStore:
    global _lead_store
    if _lead_store is None:
        if _use_postgres():
            _lead_store = PostgresLeadStore(await get_postgres_pool())
        else:
            _lead_store = InMemoryLeadStore()
        logger.info("lead_store_initialized", store_type=type(_lead_store).__name__)
    return _lead_store


async def get_agent_store() -> AgentStore:
    global _agent_store
    if _agent_store is None:
        if _use_postgres():
            _agent_store = PostgresAgentStore(await get_postgres_pool())
        else:
            _agent_store = InMemoryAgentStore()
        logger.info("agent_store_initialized", store_type=type(_agent_store).__name__)
    return _agent_store


async def get_audit_store() -> AuditStore:
    global _audit_store
    if _audit_store is None:
        if _use_postgres():
            _audit_store = PostgresAuditStore(await get_postgres_pool())
        else:
            _audit_store = InMemoryAuditStore()
        logger.info("audit_store_initialized", store_type=type(_audit_store).__name__)
    return _audit_store


async def get_health_store() -> ProviderHealthStore:
    global _health_store
    if _health_store is None:
        if _use_postgres():
            _health_store = PostgresProviderHealthStore(await get_postgres_pool())
        else:
            _health_store = InMemoryProviderHealthStore()
        logger.info("health_store_initialized", store_type=type(_health_store).__name__)
    return _health_store


async def get_credential_store() -> CredentialStore:
    global _credential_store
    if _credential_store is None:
        if _use_postgres():
            _credential_store = PostgresCredentialStore(await get_postgres_pool())
        else:
            _credential_store = InMemoryCredentialStore()
        logger.info("credential_store_initialized", store_type=type(_credential_store).__name__)
    return _credential_store


async def get_activity_logger() -> ActivityLogger:
    return AuditActivityLogger(await get_audit_store())


def get_handler_registry() -> HandlerRegistry:
    """Get the process-wide handler registry.

    Deployments register their action handlers on this registry at
    startup; tasks for unregistered pairs fail with handler_not_found.
    """
    global _handler_registry
    if _handler_registry is None:
        _handler_registry = HandlerRegistry()
    return _handler_registry


async def get_compliance_gate() -> ComplianceGate:
    return RuleBasedComplianceGate(await get_lead_store(), get_settings().compliance)


async def get_dispatcher() -> TaskDispatcher:
    """Get the TaskDispatcher wired to the configured stores."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = TaskDispatcher(
            task_store=await get_task_store(),
            lead_store=await get_lead_store(),
            agent_store=await get_agent_store(),
            compliance_gate=await get_compliance_gate(),
            handlers=get_handler_registry(),
            activity_logger=await get_activity_logger(),
            config=get_settings().dispatcher,
        )
        logger.info("dispatcher_initialized", handlers=len(get_handler_registry()))
    return _dispatcher


async def get_health_monitor() -> HealthMonitor:
    """Get the HealthMonitor with HTTP probes for the configured providers."""
    global _health_monitor
    if _health_monitor is None:
        config = get_settings().health
        _health_monitor = HealthMonitor(
            probes=default_probes(get_http_client(), config.providers),
            credential_store=await get_credential_store(),
            health_store=await get_health_store(),
            agent_store=await get_agent_store(),
            activity_logger=await get_activity_logger(),
            config=config,
        )
        logger.info("health_monitor_initialized", providers=config.providers)
    return _health_monitor


async def get_human_control() -> HumanControlService:
    global _human_control
    if _human_control is None:
        _human_control = HumanControlService(
            lead_store=await get_lead_store(),
            task_store=await get_task_store(),
            activity_logger=await get_activity_logger(),
        )
    return _human_control


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
TaskStoreDep = Annotated[TaskStore, Depends(get_task_store)]
AgentStoreDep = Annotated[AgentStore, Depends(get_agent_store)]
AuditStoreDep = Annotated[AuditStore, Depends(get_audit_store)]
HealthStoreDep = Annotated[ProviderHealthStore, Depends(get_health_store)]
ActivityLoggerDep = Annotated[ActivityLogger, Depends(get_activity_logger)]
DispatcherDep = Annotated[TaskDispatcher, Depends(get_dispatcher)]
HealthMonitorDep = Annotated[HealthMonitor, Depends(get_health_monitor)]
HumanControlDep = Annotated[HumanControlService, Depends(get_human_control)]


async def reset_dependencies() -> None:
    """Reset all cached dependencies.

    Used for testing to ensure fresh instances.
    Closes connections before resetting.
    """
    global _postgres_pool, _http_client
    global _task_store, _lead_store, _agent_store, _audit_store
    global _health_store, _credential_store
    global _handler_registry, _dispatcher, _health_monitor, _human_control

    if _postgres_pool is not None:
        await _postgres_pool.close()
        _postgres_pool = None

    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None

    _task_store = None
    _lead_store = None
    _agent_store = None
    _audit_store = None
    _health_store = None
    _credential_store = None
    _handler_registry = None
    _dispatcher = None
    _health_monitor = None
    _human_control = None
    get_settings.cache_clear()
