"""Row store port for spreadsheet-like backends.

This outbound port defines the contract the gateway needs from the external
store: named sheets made of a grid of cells, where grid row 0 is the header
row. The store has no typed columns, no row-level locking and no transactions;
concurrent writers may interleave between any two calls.

Grid coordinates are zero-based and include the header row, so the first data
row is grid row 1. Deleting a row shifts every later row up by one position.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Protocol, Sequence, runtime_checkable

from sheet_gateway.domain.entities.dataset import CollectionHandle


class SheetNotFoundError(LookupError):
    """The named sheet does not exist."""


class RowOutOfRangeError(LookupError):
    """A grid coordinate addresses a row or column that does not exist."""


@runtime_checkable
class RowStore(Protocol):
    """Protocol for spreadsheet-like row storage.

    Thread Safety:
        Implementations must tolerate concurrent calls but need not make
        multi-call sequences atomic.
    """

    @abstractmethod
    def get_sheet(self, name: str) -> CollectionHandle | None:
        """Return a handle for an existing sheet, or None."""
        ...

    @abstractmethod
    def create_sheet(self, name: str, headers: Sequence[str]) -> CollectionHandle:
        """Create a sheet whose first row is ``headers``.

        Creating a sheet that already exists returns the existing handle and
        leaves its header row untouched.
        """
        ...

    @abstractmethod
    def read_values(self, handle: CollectionHandle) -> list[list[Any]]:
        """Read the whole grid, header row first.

        Raises:
            SheetNotFoundError: If the sheet no longer exists.
        """
        ...

    @abstractmethod
    def append_row(self, handle: CollectionHandle, values: Sequence[Any]) -> None:
        """Append a row after the last grid row.

        Raises:
            SheetNotFoundError: If the sheet no longer exists.
        """
        ...

    @abstractmethod
    def set_value(self, handle: CollectionHandle, row: int, column: int, value: Any) -> None:
        """Overwrite one cell.

        Raises:
            SheetNotFoundError: If the sheet no longer exists.
            RowOutOfRangeError: If ``row`` or ``column`` is out of range.
        """
        ...

    @abstractmethod
    def delete_row(self, handle: CollectionHandle, row: int) -> None:
        """Remove one grid row; later rows shift up.

        Raises:
            SheetNotFoundError: If the sheet no longer exists.
            RowOutOfRangeError: If ``row`` is out of range.
        """
        ...

    @abstractmethod
    def sheet_names(self) -> list[str]:
        """Names of all sheets, in creation order."""
        ...
