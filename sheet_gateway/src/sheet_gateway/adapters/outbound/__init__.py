"""Outbound adapters - concrete row stores.

Exports:
    - InMemoryRowStore: Process-local grid storage for tests and development
    - FileRowStore: JSON-file-backed grid storage
"""

from sheet_gateway.adapters.outbound.file_row_store import FileRowStore
from sheet_gateway.adapters.outbound.memory_row_store import InMemoryRowStore

__all__ = [
    "FileRowStore",
    "InMemoryRowStore",
]
