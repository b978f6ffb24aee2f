"""Tests for agent status rules."""

from uuid import uuid4

import pytest

from lessor.agents.models import PROTECTED_STATUSES, AgentStatus, health_transition
from tests.factories import AgentFactory


class TestHealthTransition:
    """Tests for the degraded <-> idle circuit."""

    @pytest.mark.parametrize("current", [AgentStatus.IDLE, AgentStatus.ACTIVE])
    def test_unhealthy_degrades(self, current: AgentStatus) -> None:
        assert health_transition(current, all_healthy=False) == AgentStatus.DEGRADED

    def test_healthy_restores_degraded_to_idle(self) -> None:
        assert health_transition(AgentStatus.DEGRADED, all_healthy=True) == AgentStatus.IDLE

    def test_already_degraded_stays(self) -> None:
        assert health_transition(AgentStatus.DEGRADED, all_healthy=False) is None

    @pytest.mark.parametrize("current", [AgentStatus.IDLE, AgentStatus.ACTIVE])
    def test_healthy_agent_unchanged(self, current: AgentStatus) -> None:
        assert health_transition(current, all_healthy=True) is None

    @pytest.mark.parametrize("current", sorted(PROTECTED_STATUSES))
    @pytest.mark.parametrize("all_healthy", [True, False])
    def test_protected_statuses_never_change(
        self, current: AgentStatus, all_healthy: bool
    ) -> None:
        assert health_transition(current, all_healthy) is None


class TestAgent:
    """Tests for Agent helpers."""

    def test_missing_result_counts_as_unhealthy(self) -> None:
        agent = AgentFactory.create(
            organization_id=uuid4(),
            required_providers=["twilio", "openai", "persona"],
        )

        unhealthy = agent.unhealthy_providers({"twilio": True, "openai": False})

        assert unhealthy == ["openai", "persona"]

    def test_dispatchable(self) -> None:
        org_id = uuid4()
        assert AgentFactory.create(organization_id=org_id).is_dispatchable
        assert AgentFactory.create(
            organization_id=org_id, status=AgentStatus.DEGRADED
        ).is_dispatchable
        assert not AgentFactory.create(organization_id=org_id, is_enabled=False).is_dispatchable
        assert not AgentFactory.create(
            organization_id=org_id, status=AgentStatus.DISABLED
        ).is_dispatchable
