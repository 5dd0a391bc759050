"""In-memory row store adapter.

A simple in-memory implementation of RowStore for testing and development.
Data is not persisted across restarts.

Usage:
    store = InMemoryRowStore()
    handle = store.create_sheet("Products", ["id", "name"])
    store.append_row(handle, ["1", "Widget"])
    grid = store.read_values(handle)
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Sequence

from sheet_gateway.domain.entities.dataset import CollectionHandle
from sheet_gateway.ports.outbound.row_store import RowOutOfRangeError, SheetNotFoundError


class InMemoryRowStore:
    """In-memory implementation of RowStore.

    Each sheet is a list of rows; row 0 is the header. Reads return deep
    copies so callers can never mutate stored cells by accident.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._sheets: dict[str, list[list[Any]]] = {}
        self._lock = threading.Lock()
        self.calls: list[str] = []

    def _grid(self, handle: CollectionHandle) -> list[list[Any]]:
        grid = self._sheets.get(handle.name)
        if grid is None:
            raise SheetNotFoundError(f"Sheet not found: {handle.name}")
        return grid

    def get_sheet(self, name: str) -> CollectionHandle | None:
        with self._lock:
            return CollectionHandle(name) if name in self._sheets else None

    def create_sheet(self, name: str, headers: Sequence[str]) -> CollectionHandle:
        with self._lock:
            self.calls.append("create_sheet")
            if name not in self._sheets:
                self._sheets[name] = [list(headers)]
            return CollectionHandle(name)

    def read_values(self, handle: CollectionHandle) -> list[list[Any]]:
        with self._lock:
            self.calls.append("read_values")
            return copy.deepcopy(self._grid(handle))

    def append_row(self, handle: CollectionHandle, values: Sequence[Any]) -> None:
        with self._lock:
            self.calls.append("append_row")
            self._grid(handle).append(copy.deepcopy(list(values)))

    def set_value(self, handle: CollectionHandle, row: int, column: int, value: Any) -> None:
        with self._lock:
            self.calls.append("set_value")
            grid = self._grid(handle)
            if row < 0 or row >= len(grid) or column < 0:
                raise RowOutOfRangeError(f"Cell ({row}, {column}) out of range in {handle.name}")
            cells = grid[row]
            if column >= len(cells):
                cells.extend([""] * (column + 1 - len(cells)))
            cells[column] = copy.deepcopy(value)

    def delete_row(self, handle: CollectionHandle, row: int) -> None:
        with self._lock:
            self.calls.append("delete_row")
            grid = self._grid(handle)
            if row < 0 or row >= len(grid):
                raise RowOutOfRangeError(f"Row {row} out of range in {handle.name}")
            del grid[row]

    def sheet_names(self) -> list[str]:
        with self._lock:
            return list(self._sheets)

    def drop_sheet(self, name: str) -> bool:
        """Remove a sheet entirely. Returns False if it did not exist."""
        with self._lock:
            return self._sheets.pop(name, None) is not None

    def clear(self) -> None:
        """Clear all stored data."""
        with self._lock:
            self._sheets.clear()
            self.calls.clear()

    def __len__(self) -> int:
        """Number of sheets."""
        return len(self._sheets)
