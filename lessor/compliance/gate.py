"""ComplianceGate abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from lessor.compliance.models import ComplianceResult


class ComplianceGate(ABC):
    """Pass/fail check applied before regulated actions."""

    @abstractmethod
    async def check(
        self,
        organization_id: UUID,
        subject_id: UUID,
        action_kind: str,
        agent_key: str,
    ) -> ComplianceResult:
        """Evaluate whether an action may be taken against a lead.

        Rule outcomes are returned as violations, never raised.

        Raises:
            ComplianceCheckError: If the check itself cannot be evaluated
        """
        pass
