"""Test factories for creating test data."""

from tests.factories.deployment import Deployment
from tests.factories.orchestration import (
    AgentFactory,
    LeadFactory,
    RecordingHandler,
    StubComplianceGate,
    StubProbe,
    TaskFactory,
)

__all__ = [
    "AgentFactory",
    "Deployment",
    "LeadFactory",
    "RecordingHandler",
    "StubComplianceGate",
    "StubProbe",
    "TaskFactory",
]
