"""OpenTelemetry integration for Auth Platform JWX.

Provides tracing and structured logging for encode/decode operations. Span
attributes and log fields carry algorithm names and key ids only, never key
material or payloads.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from collections.abc import Generator

    from structlog.typing import EventDict

    from .config import TelemetryConfig

LIBRARY_NAME = "auth-platform-jwx"
LIBRARY_VERSION = "0.1.0"
SPAN_PREFIX = "jwx"
REDACTED = "[redacted]"
SENSITIVE_FIELDS = frozenset({"key", "secret", "token", "payload", "plaintext", "claims"})

# Module-level tracer and logger
_tracer: trace.Tracer | None = None
_logger: structlog.BoundLogger | None = None


def get_tracer() -> trace.Tracer:
    """Get or create the library tracer."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(LIBRARY_NAME, LIBRARY_VERSION)
    return _tracer


def get_logger() -> structlog.BoundLogger:
    """Get or create the library logger."""
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(LIBRARY_NAME)
    return _logger


def span_name(operation: str) -> str:
    """Return the span name for a codec operation, e.g. ``jwx.decode``."""
    return f"{SPAN_PREFIX}.{operation}"


def add_library_info(_logger: Any, _method: str, event_dict: EventDict) -> EventDict:
    """Stamp every event with the library name and version."""
    event_dict.setdefault("library", LIBRARY_NAME)
    event_dict.setdefault("library_version", LIBRARY_VERSION)
    return event_dict


def redact_sensitive_fields(_logger: Any, _method: str, event_dict: EventDict) -> EventDict:
    """Mask fields that could carry key material, tokens or claims."""
    for field in SENSITIVE_FIELDS.intersection(event_dict):
        event_dict[field] = REDACTED
    return event_dict


def configure_telemetry(config: TelemetryConfig) -> None:
    """Configure telemetry based on config.

    Log events are rendered as sorted JSON stamped with the library identity.
    Fields named in ``SENSITIVE_FIELDS`` are masked before rendering.

    Args:
        config: Telemetry configuration.
    """
    global _tracer, _logger

    if not config.enabled:
        _tracer = trace.NoOpTracer()
        return

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            redact_sensitive_fields,
            add_library_info,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level_number(config.log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _tracer = trace.get_tracer(config.service_name, LIBRARY_VERSION)
    _logger = structlog.get_logger(config.service_name)


def log_level_number(level: str) -> int:
    """Map a level name to its ``logging`` number, defaulting to INFO."""
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


@contextmanager
def trace_operation(
    operation: str,
    *,
    attributes: dict[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """Context manager for tracing a codec operation.

    Args:
        operation: Operation name, prefixed with ``jwx.`` to form the span name.
        attributes: Optional span attributes. ``None`` and empty values are dropped.

    Yields:
        The active span.
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(span_name(operation)) as span:
        span.set_attribute(f"{SPAN_PREFIX}.operation", operation)
        if attributes:
            for key, value in attributes.items():
                if value not in (None, ""):
                    span.set_attribute(key, value)
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
