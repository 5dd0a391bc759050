"""Collection-level access to the row store.

CollectionStore is the only component that talks to the RowStore port. It
auto-provisions collections from the schema registry, hides the header row
from row positions (data row 0 is grid row 1), and turns store-level lookup
failures into NotFoundError.

Row positions returned by a read are only valid until the next call: any
delete (ours or a concurrent writer's) shifts later rows up.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from sheet_gateway.domain.entities.dataset import CollectionHandle, Dataset
from sheet_gateway.domain.errors import NotFoundError
from sheet_gateway.domain.services.schema_registry import SchemaRegistry
from sheet_gateway.infrastructure.logging import get_logger
from sheet_gateway.ports.outbound.row_store import (
    RowOutOfRangeError,
    RowStore,
    SheetNotFoundError,
)

if TYPE_CHECKING:
    from sheet_gateway.infrastructure.metrics import MetricsRegistry

logger = get_logger(__name__)


class CollectionStore:
    """Open, scan and mutate collections."""

    def __init__(
        self,
        row_store: RowStore,
        registry: SchemaRegistry | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the collection store.

        Args:
            row_store: Backend implementing the RowStore port.
            registry: Schema registry used when provisioning.
            metrics: Optional metrics registry.
        """
        self._rows = row_store
        self._registry = registry or SchemaRegistry()
        self._metrics = metrics

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    def _count(self, operation: str) -> None:
        if self._metrics is not None:
            self._metrics.store_operations_total.labels(operation=operation).inc()

    def open(self, name: str) -> CollectionHandle:
        """Return a handle, creating the collection with its header row if absent."""
        self._count("open")
        handle = self._rows.get_sheet(name)
        if handle is not None:
            return handle
        columns = self._registry.columns_for(name)
        handle = self._rows.create_sheet(name, columns)
        if self._metrics is not None:
            self._metrics.collections_provisioned_total.inc()
        logger.info("collection_provisioned", collection=name, columns=list(columns))
        return handle

    def read_all(self, handle: CollectionHandle) -> Dataset:
        """Full scan. A collection that has vanished reads as empty."""
        self._count("read")
        try:
            grid = self._rows.read_values(handle)
        except SheetNotFoundError:
            return Dataset()
        if not grid:
            return Dataset()
        headers = [str(h) for h in grid[0]]
        return Dataset(headers=headers, rows=[list(r) for r in grid[1:]])

    def read_existing(self, name: str) -> Dataset:
        """Full scan without provisioning; a missing collection is empty."""
        handle = self._rows.get_sheet(name)
        if handle is None:
            return Dataset()
        return self.read_all(handle)

    def append(self, handle: CollectionHandle, values: Sequence[Any]) -> None:
        """Append a data row. Not locked against concurrent writers."""
        self._count("append")
        try:
            self._rows.append_row(handle, values)
        except SheetNotFoundError as exc:
            raise NotFoundError(f"Collection not found: {handle.name}", handle.name) from exc

    def set_cell(self, handle: CollectionHandle, row_index: int, col_index: int, value: Any) -> None:
        """Overwrite one cell of data row ``row_index``.

        Raises:
            NotFoundError: If the row (or the collection) no longer exists.
        """
        self._count("set_cell")
        try:
            self._rows.set_value(handle, row_index + 1, col_index, value)
        except (SheetNotFoundError, RowOutOfRangeError) as exc:
            raise NotFoundError("ID not found", handle.name) from exc

    def delete_row(self, handle: CollectionHandle, row_index: int) -> None:
        """Remove data row ``row_index``; later rows shift up.

        Raises:
            NotFoundError: If the row (or the collection) no longer exists.
        """
        self._count("delete_row")
        try:
            self._rows.delete_row(handle, row_index + 1)
        except (SheetNotFoundError, RowOutOfRangeError) as exc:
            raise NotFoundError("ID not found", handle.name) from exc

    def collection_names(self) -> list[str]:
        return self._rows.sheet_names()
