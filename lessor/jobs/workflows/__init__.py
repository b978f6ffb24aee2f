"""Hatchet workflow definitions.

- DispatchDueTasksWorkflow: drains one batch of due tasks
- CheckProviderHealthWorkflow: runs full health checks per organization
"""

from lessor.jobs.workflows.health_check import (
    CheckHealthInput,
    CheckHealthOutput,
    CheckProviderHealthWorkflow,
)
from lessor.jobs.workflows.task_dispatch import (
    DispatchDueTasksWorkflow,
    DispatchTasksOutput,
)

__all__ = [
    "DispatchDueTasksWorkflow",
    "DispatchTasksOutput",
    "CheckProviderHealthWorkflow",
    "CheckHealthInput",
    "CheckHealthOutput",
]
