"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: Handle incoming requests (REST endpoint, response encoding)
- Outbound adapters: Implement external dependencies (row stores)
"""

from sheet_gateway.adapters.outbound import FileRowStore, InMemoryRowStore

__all__ = [
    # Outbound adapters
    "FileRowStore",
    "InMemoryRowStore",
]
