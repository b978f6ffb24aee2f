"""Tests for the store error hierarchy."""

import pytest

from lessor.db.errors import (
    ConflictError,
    ConnectionError,
    NotFoundError,
    StoreError,
    ValidationError,
)


@pytest.mark.parametrize(
    "error_class",
    [ConnectionError, NotFoundError, ConflictError, ValidationError],
)
def test_subclasses_are_store_errors(error_class: type[StoreError]) -> None:
    error = error_class("boom")

    assert isinstance(error, StoreError)
    assert str(error) == "boom"
    assert error.cause is None


def test_cause_is_preserved() -> None:
    cause = OSError("connection refused")

    error = ConnectionError("unreachable", cause=cause)

    assert error.cause is cause


def test_connection_error_does_not_shadow_builtin_hierarchy() -> None:
    assert not issubclass(ConnectionError, OSError)
