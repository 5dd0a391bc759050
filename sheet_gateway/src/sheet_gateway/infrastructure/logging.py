"""Structured logging for the gateway.

Every log line is an event name plus key/value context, e.g.
``record_created collection=Products id=7``. The action and collection of the
request being dispatched are merged into every line from context variables.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from sheet_gateway.infrastructure.config import ObservabilityConfig

REDACTED = "***"

# Keys that may carry the shared secret or raw client payloads
SENSITIVE_KEYS = frozenset({"token", "secret", "shared_secret"})


def redact_secrets(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Mask values of sensitive keys before rendering."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def setup_logging(observability: ObservabilityConfig) -> None:
    """
    Configure structlog and the stdlib root logger.

    uvicorn logs through the stdlib, so both write to stdout at the same level.

    Args:
        observability: Observability section of the gateway config
    """
    level = getattr(logging, observability.log_level)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    if observability.log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_secrets,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Return a structlog logger, optionally bound to ``initial_context``."""
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


def bind_request_context(action: str, sheet: str | None) -> None:
    """Replace the per-request logging context with ``action`` and ``sheet``."""
    structlog.contextvars.clear_contextvars()
    if sheet:
        structlog.contextvars.bind_contextvars(action=action, collection=sheet)
    else:
        structlog.contextvars.bind_contextvars(action=action)
