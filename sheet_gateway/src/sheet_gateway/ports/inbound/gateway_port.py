"""Inbound port for the gateway.

This protocol defines the interface that the application layer exposes to
inbound adapters (the HTTP endpoint, tests, scripts).
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from sheet_gateway.domain.value_objects.request import GatewayRequest


@runtime_checkable
class GatewayPort(Protocol):
    """Protocol for the single gateway entry point."""

    def dispatch(self, request: GatewayRequest) -> Any:
        """Run the action named by ``request``.

        Handler-level failures are returned as ``{"error": ...}`` bodies,
        never raised.

        Args:
            request: Decoded request.

        Returns:
            A JSON-serializable body (object or list).
        """
        ...
