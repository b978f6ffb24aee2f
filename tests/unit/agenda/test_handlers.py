"""Tests for HandlerRegistry."""

import pytest

from lessor.agenda.errors import HandlerNotFoundError
from lessor.agenda.handlers import HandlerRegistry
from lessor.agenda.models import ActionKind
from tests.factories import RecordingHandler


class TestHandlerRegistry:
    """Tests for handler registration and resolution."""

    def test_resolves_specific_registration(self) -> None:
        registry = HandlerRegistry()
        sms = RecordingHandler()
        registry.register("messenger", sms, ActionKind.SMS)

        assert registry.resolve("messenger", "sms") is sms

    def test_agent_wide_registration_serves_every_kind(self) -> None:
        registry = HandlerRegistry()
        fallback = RecordingHandler()
        registry.register("scorer", fallback)

        assert registry.resolve("scorer", "score") is fallback
        assert registry.resolve("scorer", "notify") is fallback

    def test_specific_registration_wins_over_agent_wide(self) -> None:
        registry = HandlerRegistry()
        fallback = RecordingHandler()
        call = RecordingHandler()
        registry.register("caller", fallback)
        registry.register("caller", call, "call")

        assert registry.resolve("caller", "call") is call
        assert registry.resolve("caller", "email") is fallback

    def test_missing_registration_raises(self) -> None:
        registry = HandlerRegistry()
        registry.register("caller", RecordingHandler(), ActionKind.CALL)

        with pytest.raises(HandlerNotFoundError) as exc_info:
            registry.resolve("caller", "sms")

        assert exc_info.value.reason == "handler_not_found"
        assert ("caller", "sms") not in registry
        assert ("caller", "call") in registry

    def test_unknown_action_kind_raises(self) -> None:
        registry = HandlerRegistry()
        registry.register("caller", RecordingHandler())

        with pytest.raises(HandlerNotFoundError) as exc_info:
            registry.resolve("caller", "fax")

        assert "Unknown action kind" in exc_info.value.message

    def test_register_rejects_unknown_kind(self) -> None:
        registry = HandlerRegistry()

        with pytest.raises(ValueError):
            registry.register("caller", RecordingHandler(), "fax")
        assert len(registry) == 0
