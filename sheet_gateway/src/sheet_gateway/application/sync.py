"""Full and delta synchronization for offline clients.

Clients keep a local copy of every collection. ``sync_all`` hands them the
whole workbook; ``sync_changes`` hands them only the collections whose change
time (from the meta collection) is newer than the client's last sync, and
within those only the rows whose ``updatedAt`` is newer.
"""

from __future__ import annotations

from typing import Any

from sheet_gateway.application.change_tracker import ChangeTracker
from sheet_gateway.application.clock import Clock, iso_timestamp, parse_timestamp, system_clock
from sheet_gateway.domain.errors import ValidationError
from sheet_gateway.domain.services.collection_store import CollectionStore
from sheet_gateway.domain.services.query_engine import Record, to_records
from sheet_gateway.domain.services.schema_registry import META_COLLECTION
from sheet_gateway.domain.value_objects.identifiers import UPDATED_AT_COLUMN


class SyncService:
    """Builds sync snapshots from the collection store."""

    def __init__(
        self,
        store: CollectionStore,
        tracker: ChangeTracker,
        clock: Clock = system_clock,
    ) -> None:
        self._store = store
        self._tracker = tracker
        self._clock = clock

    def _records(self, name: str) -> list[Record]:
        dataset = self._store.read_existing(name)
        return to_records(dataset.headers, dataset.rows)

    def sync_all(self) -> dict[str, Any]:
        """Every collection (meta excluded) as raw records.

        Returns:
            ``{<collection>: [records], "__meta__": {...}, "now": iso}``.
        """
        snapshot: dict[str, Any] = {}
        for name in self._store.collection_names():
            if name == META_COLLECTION:
                continue
            snapshot[name] = self._records(name)
        snapshot["__meta__"] = self._tracker.last_updated()
        snapshot["now"] = iso_timestamp(self._clock())
        return snapshot

    def sync_changes(self, since: str | None) -> dict[str, Any]:
        """Collections and rows changed after ``since``.

        A collection whose change time moved but has no row newer than
        ``since`` (a delete, say) comes back whole with ``fullRefresh: true``.
        Rows without an ``updatedAt`` are always included.

        Args:
            since: ISO timestamp of the client's last sync.

        Returns:
            ``{since, now, changes: {<collection>: {fullRefresh, rows}}}``.

        Raises:
            ValidationError: If ``since`` is missing or not a timestamp.
        """
        if not since:
            raise ValidationError("Missing since param (ISO timestamp)")
        cutoff = parse_timestamp(since)
        if cutoff is None:
            raise ValidationError(f"Invalid since timestamp: {since}")

        changes: dict[str, dict[str, Any]] = {}
        for name, last_updated in self._tracker.last_updated().items():
            moment = parse_timestamp(last_updated)
            if moment is None or moment <= cutoff:
                continue
            rows = self._records(name)
            changed = []
            for record in rows:
                stamp = record.get(UPDATED_AT_COLUMN)
                if not stamp:
                    changed.append(record)
                    continue
                row_moment = parse_timestamp(stamp)
                if row_moment is None or row_moment > cutoff:
                    changed.append(record)
            if changed:
                changes[name] = {"fullRefresh": False, "rows": changed}
            else:
                changes[name] = {"fullRefresh": True, "rows": rows}

        return {"since": since, "now": iso_timestamp(self._clock()), "changes": changes}
