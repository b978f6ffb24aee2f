"""Observability: structured logging and metrics."""

from lessor.observability.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
