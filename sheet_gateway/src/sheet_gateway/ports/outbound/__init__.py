"""Outbound ports - what the gateway needs from the outside world.

Exports:
    - RowStore: Spreadsheet-like grid storage
    - SheetNotFoundError: Sheet does not exist
    - RowOutOfRangeError: Grid coordinate out of range
"""

from sheet_gateway.ports.outbound.row_store import (
    RowOutOfRangeError,
    RowStore,
    SheetNotFoundError,
)

__all__ = [
    "RowOutOfRangeError",
    "RowStore",
    "SheetNotFoundError",
]
