"""Action handler interface and registry.

Handlers perform the side-effecting work of a task (placing a call,
sending a message, scoring a transcript). The registry maps an
(agent_key, action_kind) pair to a handler and is injected into the
dispatcher, so each deployment and each test chooses its own set.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from lessor.agenda.errors import HandlerNotFoundError
from lessor.agenda.models import ActionKind, Task
from lessor.agents.models import Agent
from lessor.leads.models import Lead


class HandlerOutcome(BaseModel):
    """Result reported by an action handler."""

    success: bool
    detail: dict[str, Any] = Field(default_factory=dict, description="Structured telemetry")
    cost: float = Field(default=0.0, ge=0)
    error: str | None = Field(default=None, description="Failure message when success is False")


class ActionHandler(ABC):
    """Performs the work for one agent/action pair."""

    @abstractmethod
    async def handle(self, task: Task, lead: Lead, agent: Agent) -> HandlerOutcome:
        """Execute the task.

        Raising is equivalent to returning success=False with the
        exception message.
        """
        pass


class HandlerRegistry:
    """Lookup table from (agent_key, action_kind) to ActionHandler.

    A handler registered without an action kind serves every kind for
    that agent, unless a more specific registration exists.
    """

    def __init__(self) -> None:
        self._handlers: dict[tuple[str, ActionKind | None], ActionHandler] = {}

    def register(
        self,
        agent_key: str,
        handler: ActionHandler,
        action_kind: ActionKind | str | None = None,
    ) -> None:
        kind = ActionKind(action_kind) if action_kind is not None else None
        self._handlers[(agent_key, kind)] = handler

    def resolve(self, agent_key: str, action_kind: str) -> ActionHandler:
        """Find the handler for a task.

        Raises:
            HandlerNotFoundError: Unknown action kind or no registration
        """
        try:
            kind = ActionKind(action_kind)
        except ValueError:
            raise HandlerNotFoundError(
                f"Unknown action kind: {action_kind}",
                details={"agent_key": agent_key, "action_kind": action_kind},
            ) from None

        handler = self._handlers.get((agent_key, kind)) or self._handlers.get((agent_key, None))
        if handler is None:
            raise HandlerNotFoundError(
                f"No handler registered for {agent_key}/{kind.value}",
                details={"agent_key": agent_key, "action_kind": kind.value},
            )
        return handler

    def __contains__(self, key: tuple[str, str]) -> bool:
        agent_key, action_kind = key
        try:
            self.resolve(agent_key, action_kind)
        except HandlerNotFoundError:
            return False
        return True

    def __len__(self) -> int:
        return len(self._handlers)
