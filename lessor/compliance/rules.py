"""Rule-based compliance gate.

Enforces contact consent and the organization's contact window before
outbound calls and messages.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from lessor.agenda.errors import ComplianceCheckError
from lessor.compliance.gate import ComplianceGate
from lessor.compliance.models import ComplianceResult, ComplianceViolation
from lessor.config.models.compliance import CompliancePolicy
from lessor.leads.models import Lead
from lessor.leads.store import LeadStore
from lessor.observability.logging import get_logger

logger = get_logger(__name__)

_DAY_NAMES = {1: "Mon", 2: "Tue", 3: "Wed", 4: "Thu", 5: "Fri", 6: "Sat", 7: "Sun"}


class RuleBasedComplianceGate(ComplianceGate):
    """Default ComplianceGate driven by lead flags and a contact-window policy."""

    def __init__(
        self,
        lead_store: LeadStore,
        policy: CompliancePolicy,
        policies: dict[UUID, CompliancePolicy] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Create the gate.

        Args:
            lead_store: Source of consent flags
            policy: Default policy
            policies: Per-organization overrides
            clock: Returns the current aware datetime; defaults to UTC now
        """
        self._leads = lead_store
        self._default_policy = policy
        self._policies = dict(policies or {})
        self._clock = clock or (lambda: datetime.now(UTC))

    def policy_for(self, organization_id: UUID) -> CompliancePolicy:
        return self._policies.get(organization_id, self._default_policy)

    async def check(
        self,
        organization_id: UUID,
        subject_id: UUID,
        action_kind: str,
        agent_key: str,
    ) -> ComplianceResult:
        lead = await self._leads.get(subject_id)
        if lead is None or lead.organization_id != organization_id:
            raise ComplianceCheckError(
                f"Lead {subject_id} not found",
                details={"subject_id": str(subject_id)},
            )

        violations = self._consent_violations(lead, action_kind)
        policy = self.policy_for(organization_id)
        if policy.enforce_working_hours:
            violations.extend(self._window_violations(policy))

        if violations:
            logger.info(
                "compliance_violations_found",
                organization_id=str(organization_id),
                subject_id=str(subject_id),
                action_kind=action_kind,
                agent_key=agent_key,
                codes=[v.code for v in violations],
            )

        return ComplianceResult.from_violations(violations)

    def _consent_violations(self, lead: Lead, action_kind: str) -> list[ComplianceViolation]:
        violations: list[ComplianceViolation] = []

        if lead.do_not_contact:
            violations.append(
                ComplianceViolation(code="do_not_contact", detail="Lead is marked do-not-contact")
            )
        if action_kind == "sms" and not lead.sms_consent:
            violations.append(
                ComplianceViolation(code="no_sms_consent", detail="Lead has not consented to SMS")
            )
        if action_kind == "call" and not lead.call_consent:
            violations.append(
                ComplianceViolation(code="no_call_consent", detail="Lead has not consented to calls")
            )

        return violations

    def _window_violations(self, policy: CompliancePolicy) -> list[ComplianceViolation]:
        local = self._clock().astimezone(ZoneInfo(policy.timezone))

        if local.isoweekday() not in policy.working_days:
            return [
                ComplianceViolation(
                    code="outside_working_days",
                    detail=f"{_DAY_NAMES[local.isoweekday()]} is not a working day",
                )
            ]

        now = local.time().replace(tzinfo=None)
        if not (policy.working_hours_start <= now < policy.working_hours_end):
            return [
                ComplianceViolation(
                    code="outside_working_hours",
                    detail=(
                        f"{now.strftime('%H:%M')} is outside "
                        f"{policy.working_hours_start.strftime('%H:%M')}-"
                        f"{policy.working_hours_end.strftime('%H:%M')}"
                    ),
                )
            ]

        return []
