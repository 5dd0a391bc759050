"""Infrastructure layer - cross-cutting concerns.

The DI container lives in ``sheet_gateway.infrastructure.container`` and is
imported from there; it depends on the application layer.
"""

from sheet_gateway.infrastructure.config import Config, get_config
from sheet_gateway.infrastructure.logging import get_logger, setup_logging
from sheet_gateway.infrastructure.metrics import MetricsRegistry, setup_metrics
from sheet_gateway.infrastructure.tracing import get_tracer, request_span, setup_tracing

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "request_span",
]
