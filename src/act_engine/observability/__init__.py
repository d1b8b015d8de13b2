"""Public observability primitives: structured logging and run correlation."""

from act_engine.observability.logging import (
    configure_logging,
    correlation_scope,
    get_correlation_context,
    get_logger,
    redact_event,
)

__all__ = [
    "configure_logging",
    "correlation_scope",
    "get_correlation_context",
    "get_logger",
    "redact_event",
]
