"""Inbound ports - what the gateway offers to its callers.

Exports:
    - GatewayPort: Single dispatch entry point
"""

from sheet_gateway.ports.inbound.gateway_port import GatewayPort

__all__ = ["GatewayPort"]
