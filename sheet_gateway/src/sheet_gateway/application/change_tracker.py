"""Per-collection change times.

After every successful mutation the gateway records when the collection last
changed in the ``__Meta__`` collection (``sheetName, lastUpdated``). Delta
sync uses these times to decide which collections to rescan.
"""

from __future__ import annotations

from sheet_gateway.application.clock import Clock, iso_timestamp, parse_timestamp, system_clock
from sheet_gateway.domain.services.collection_store import CollectionStore
from sheet_gateway.domain.services.query_engine import find_row_index, to_records
from sheet_gateway.domain.services.schema_registry import META_COLLECTION
from sheet_gateway.domain.value_objects.identifiers import as_text


class ChangeTracker:
    """Reads and writes the meta collection."""

    NAME_COLUMN = "sheetName"
    TIME_COLUMN = "lastUpdated"

    def __init__(
        self,
        store: CollectionStore,
        clock: Clock = system_clock,
        enabled: bool = True,
    ) -> None:
        self._store = store
        self._clock = clock
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def touch(self, collection: str) -> None:
        """Mark ``collection`` as changed now."""
        if not self._enabled or collection == META_COLLECTION:
            return
        now = iso_timestamp(self._clock())
        handle = self._store.open(META_COLLECTION)
        dataset = self._store.read_all(handle)
        row = find_row_index(dataset.headers, dataset.rows, collection, self.NAME_COLUMN)
        col = dataset.column_index(self.TIME_COLUMN)
        if row >= 0 and col >= 0:
            self._store.set_cell(handle, row, col, now)
        else:
            self._store.append(
                handle,
                [collection if h == self.NAME_COLUMN else now if h == self.TIME_COLUMN else ""
                 for h in dataset.headers or (self.NAME_COLUMN, self.TIME_COLUMN)],
            )

    def last_updated(self) -> dict[str, str | None]:
        """Map of collection name to its last change time (ISO), if known."""
        dataset = self._store.read_existing(META_COLLECTION)
        changes: dict[str, str | None] = {}
        for record in to_records(dataset.headers, dataset.rows):
            name = as_text(record.get(self.NAME_COLUMN))
            if not name:
                continue
            moment = parse_timestamp(record.get(self.TIME_COLUMN))
            changes[name] = iso_timestamp(moment) if moment else None
        return changes
