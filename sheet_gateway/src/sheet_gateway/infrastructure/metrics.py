"""Prometheus metrics for the sheet gateway."""

from __future__ import annotations

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    Info,
    generate_latest,
    start_http_server,
)

from sheet_gateway import __version__


class MetricsRegistry:
    """Registry of all gateway metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Request metrics
        self.requests_total = Counter(
            "gateway_requests_total",
            "Total number of gateway requests",
            ["action", "status"],  # status: success, error
            registry=self._registry,
        )

        self.request_latency_seconds = Histogram(
            "gateway_request_latency_seconds",
            "Request latency in seconds",
            ["action"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
            registry=self._registry,
        )

        # Store metrics
        self.store_operations_total = Counter(
            "gateway_store_operations_total",
            "Total row store calls",
            ["operation"],  # open, read, append, set_cell, delete_row
            registry=self._registry,
        )

        self.collections_provisioned_total = Counter(
            "gateway_collections_provisioned_total",
            "Collections created on first access",
            registry=self._registry,
        )

        # Batch metrics
        self.batch_steps_total = Counter(
            "gateway_batch_steps_total",
            "Batch steps executed",
            ["status"],  # success, failed
            registry=self._registry,
        )

        # Server info
        self.info = Info(
            "sheet_gateway",
            "Sheet gateway information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def render(self) -> bytes:
        """Prometheus text exposition of this registry."""
        return generate_latest(self._registry)


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(
    port: int = 8001,
    registry: CollectorRegistry | None = None,
    backend: str = "file",
) -> MetricsRegistry:
    """
    Create the global registry and start the Prometheus scrape server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry
        backend: Row store backend, reported in the info metric

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    _metrics.info.info({"version": __version__, "backend": backend})

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
