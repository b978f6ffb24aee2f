"""Compliance gating for regulated outbound actions."""

from lessor.compliance.gate import ComplianceGate
from lessor.compliance.models import ComplianceResult, ComplianceViolation
from lessor.compliance.rules import RuleBasedComplianceGate

__all__ = [
    "ComplianceGate",
    "ComplianceResult",
    "ComplianceViolation",
    "RuleBasedComplianceGate",
]
