"""Collection handles and full-scan datasets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class CollectionHandle:
    """Opaque handle to a collection in the row store.

    A handle names a collection; it never pins row positions. Positions are
    only valid for the duration of the call that read them.
    """

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass
class Dataset:
    """Result of a full collection scan.

    Attributes:
        headers: Ordered column names from the header row.
        rows: Positional value lists aligned to ``headers``.
    """

    headers: list[str] = field(default_factory=list)
    rows: list[list[Any]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when the collection has no data rows."""
        return not self.rows

    def column_index(self, column: str) -> int:
        """Position of a column in the header row, or -1 if absent."""
        try:
            return self.headers.index(column)
        except ValueError:
            return -1

    def __len__(self) -> int:
        return len(self.rows)
