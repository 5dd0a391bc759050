"""Record-level writes: create, update, delete.

These are the write primitives shared by the single-record actions and the
batch runner. Each one is a read-then-write sequence against a store with no
transactions: the row position found by the read is used immediately and then
forgotten, and a logical update is one cell write per column, so a concurrent
writer can interleave between any two of them.
"""

from __future__ import annotations

from typing import Any, Literal, Mapping

from sheet_gateway.application.change_tracker import ChangeTracker
from sheet_gateway.application.clock import Clock, iso_timestamp, system_clock
from sheet_gateway.domain.entities.dataset import Dataset
from sheet_gateway.domain.errors import DuplicateIdError, NotFoundError, ValidationError
from sheet_gateway.domain.services.collection_store import CollectionStore
from sheet_gateway.domain.services.query_engine import Record, find_row_index
from sheet_gateway.domain.value_objects.identifiers import (
    CREATED_AT_COLUMN,
    ID_COLUMN,
    UPDATED_AT_COLUMN,
    as_text,
    numeric_id,
)
from sheet_gateway.infrastructure.logging import get_logger

logger = get_logger(__name__)

# Columns a payload can never overwrite on update.
_PROTECTED_ON_UPDATE = frozenset({ID_COLUMN, CREATED_AT_COLUMN, UPDATED_AT_COLUMN})


def next_id(dataset: Dataset) -> str:
    """(max existing numeric id) + 1, or ``"1"`` for an empty collection.

    Non-numeric ids are ignored.
    """
    col = dataset.column_index(ID_COLUMN)
    highest = 0
    if col >= 0:
        for row in dataset.rows:
            value = numeric_id(row[col]) if col < len(row) else None
            if value is not None and value > highest:
                highest = value
    return str(highest + 1)


def _cell(value: Any) -> Any:
    return "" if value is None else value


class RecordWriter:
    """Creates, updates and deletes records in any collection."""

    def __init__(
        self,
        store: CollectionStore,
        tracker: ChangeTracker | None = None,
        clock: Clock = system_clock,
        duplicate_ids: Literal["reject", "allow"] = "reject",
    ) -> None:
        """Initialize the writer.

        Args:
            store: Collection store.
            tracker: Optional change tracker touched after each mutation.
            clock: Time source for createdAt/updatedAt.
            duplicate_ids: What to do when a create supplies an existing id.
        """
        self._store = store
        self._tracker = tracker
        self._clock = clock
        self._duplicate_ids = duplicate_ids

    def _touch(self, sheet: str) -> None:
        if self._tracker is not None:
            self._tracker.touch(sheet)

    @staticmethod
    def _require_id_column(dataset: Dataset, sheet: str) -> None:
        if dataset.column_index(ID_COLUMN) < 0:
            raise ValidationError(f"Collection {sheet} has no id column", sheet)

    def create(self, sheet: str, payload: Mapping[str, Any]) -> Record:
        """Append a new record.

        The id is generated unless the payload supplies one. ``createdAt`` and
        ``updatedAt`` are stamped when the collection declares them, whatever
        the payload says.

        Args:
            sheet: Target collection.
            payload: Field map.

        Returns:
            The stored record, keyed by the collection's header row.

        Raises:
            ValidationError: If the collection has no id column.
            DuplicateIdError: If the supplied id exists and duplicates are rejected.
        """
        handle = self._store.open(sheet)
        dataset = self._store.read_all(handle)
        self._require_id_column(dataset, sheet)

        data = dict(payload)
        supplied = data.get(ID_COLUMN)
        if supplied is None or as_text(supplied) == "":
            data[ID_COLUMN] = next_id(dataset)
        else:
            data[ID_COLUMN] = as_text(supplied)
            if (
                self._duplicate_ids == "reject"
                and find_row_index(dataset.headers, dataset.rows, data[ID_COLUMN]) >= 0
            ):
                raise DuplicateIdError(f"Duplicate id: {data[ID_COLUMN]}", sheet)

        now = iso_timestamp(self._clock())
        if CREATED_AT_COLUMN in dataset.headers:
            data[CREATED_AT_COLUMN] = now
        if UPDATED_AT_COLUMN in dataset.headers:
            data[UPDATED_AT_COLUMN] = now

        values = [_cell(data.get(h)) for h in dataset.headers]
        self._store.append(handle, values)
        self._touch(sheet)
        logger.info("record_created", collection=sheet, id=data[ID_COLUMN])
        return dict(zip(dataset.headers, values))

    def update(self, sheet: str, record_id: str, payload: Mapping[str, Any]) -> list[str]:
        """Overwrite the header columns present in ``payload``.

        ``updatedAt`` is always stamped; ``id`` and ``createdAt`` are never
        taken from the payload. Each column is a separate cell write.

        Returns:
            The columns written, in header order.

        Raises:
            NotFoundError: If no record has ``record_id``.
        """
        handle = self._store.open(sheet)
        dataset = self._store.read_all(handle)
        self._require_id_column(dataset, sheet)
        row = find_row_index(dataset.headers, dataset.rows, record_id)
        if row < 0:
            raise NotFoundError("ID not found", sheet)

        now = iso_timestamp(self._clock())
        written = []
        for col, header in enumerate(dataset.headers):
            if header == UPDATED_AT_COLUMN:
                self._store.set_cell(handle, row, col, now)
            elif header in _PROTECTED_ON_UPDATE or header not in payload:
                continue
            else:
                self._store.set_cell(handle, row, col, _cell(payload[header]))
            written.append(header)

        self._touch(sheet)
        logger.info("record_updated", collection=sheet, id=record_id, columns=written)
        return written

    def delete(self, sheet: str, record_id: str) -> None:
        """Physically remove the record with ``record_id``.

        Raises:
            NotFoundError: If no record has ``record_id``.
        """
        handle = self._store.open(sheet)
        dataset = self._store.read_all(handle)
        self._require_id_column(dataset, sheet)
        row = find_row_index(dataset.headers, dataset.rows, record_id)
        if row < 0:
            raise NotFoundError("ID not found", sheet)
        self._store.delete_row(handle, row)
        self._touch(sheet)
        logger.info("record_deleted", collection=sheet, id=record_id)
