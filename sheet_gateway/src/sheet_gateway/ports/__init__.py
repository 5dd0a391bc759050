"""Ports layer - interface definitions following Hexagonal Architecture.

- Inbound ports: APIs offered to clients (GatewayPort)
- Outbound ports: Dependencies on external systems (RowStore)

Adapters implement these ports with concrete functionality.
"""

from sheet_gateway.ports.inbound import GatewayPort
from sheet_gateway.ports.outbound import RowOutOfRangeError, RowStore, SheetNotFoundError

__all__ = [
    "GatewayPort",
    "RowOutOfRangeError",
    "RowStore",
    "SheetNotFoundError",
]
