"""Tests for InMemoryAgentStore."""

from uuid import uuid4

import pytest

from lessor.agents.models import AgentStatus
from lessor.agents.stores.inmemory import InMemoryAgentStore
from tests.factories import AgentFactory


@pytest.fixture
def store() -> InMemoryAgentStore:
    return InMemoryAgentStore()


class TestAgentLookup:
    """Tests for agent reads."""

    @pytest.mark.asyncio
    async def test_get_by_key_is_scoped_to_organization(self, store: InMemoryAgentStore) -> None:
        org_a, org_b = uuid4(), uuid4()
        agent = AgentFactory.create(organization_id=org_a, agent_key="caller")
        await store.save(agent)

        assert (await store.get_by_key(org_a, "caller")).id == agent.id
        assert await store.get_by_key(org_b, "caller") is None

    @pytest.mark.asyncio
    async def test_list_enabled_sorted_by_key(self, store: InMemoryAgentStore) -> None:
        org_id = uuid4()
        for key in ("scorer", "caller", "messenger"):
            await store.save(AgentFactory.create(organization_id=org_id, agent_key=key))
        await store.save(
            AgentFactory.create(organization_id=org_id, agent_key="verifier", is_enabled=False)
        )

        agents = await store.list_enabled(org_id)

        assert [a.agent_key for a in agents] == ["caller", "messenger", "scorer"]

    @pytest.mark.asyncio
    async def test_list_organization_ids(self, store: InMemoryAgentStore) -> None:
        active_org, dormant_org = uuid4(), uuid4()
        await store.save(AgentFactory.create(organization_id=active_org))
        await store.save(AgentFactory.create(organization_id=dormant_org, is_enabled=False))

        assert await store.list_organization_ids() == [active_org]


class TestUpdateStatus:
    """Tests for conditional status writes."""

    @pytest.mark.asyncio
    async def test_unconditional_update(self, store: InMemoryAgentStore) -> None:
        agent = AgentFactory.create(organization_id=uuid4())
        await store.save(agent)

        ok = await store.update_status(
            agent.id, AgentStatus.DEGRADED, last_error_message="twilio down"
        )

        stored = await store.get(agent.id)
        assert ok is True
        assert stored.status == AgentStatus.DEGRADED
        assert stored.last_error_message == "twilio down"
        assert store.status_writes == 1

    @pytest.mark.asyncio
    async def test_expected_status_mismatch_is_rejected(self, store: InMemoryAgentStore) -> None:
        agent = AgentFactory.create(organization_id=uuid4(), status=AgentStatus.DISABLED)
        await store.save(agent)

        ok = await store.update_status(
            agent.id, AgentStatus.DEGRADED, expected_status=AgentStatus.IDLE
        )

        assert ok is False
        assert (await store.get(agent.id)).status == AgentStatus.DISABLED
        assert store.status_writes == 0

    @pytest.mark.asyncio
    async def test_missing_agent(self, store: InMemoryAgentStore) -> None:
        assert await store.update_status(uuid4(), AgentStatus.IDLE) is False
