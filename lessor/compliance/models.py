"""Compliance check result models."""

from pydantic import BaseModel, ConfigDict, Field


class ComplianceViolation(BaseModel):
    """One rule a regulated action would break."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="Stable violation code, e.g. no_sms_consent")
    detail: str = Field(default="", description="Human-readable explanation")


class ComplianceResult(BaseModel):
    """Outcome of a compliance check."""

    passed: bool
    violations: list[ComplianceViolation] = Field(default_factory=list)

    @classmethod
    def from_violations(cls, violations: list[ComplianceViolation]) -> "ComplianceResult":
        return cls(passed=not violations, violations=violations)

    @property
    def codes(self) -> list[str]:
        return [v.code for v in self.violations]
