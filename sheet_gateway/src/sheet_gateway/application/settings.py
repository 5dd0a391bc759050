"""Key/value settings stored in the ``Settings`` collection."""

from __future__ import annotations

from typing import Any

from sheet_gateway.application.change_tracker import ChangeTracker
from sheet_gateway.application.clock import Clock, iso_timestamp, system_clock
from sheet_gateway.domain.errors import NotFoundError, ValidationError
from sheet_gateway.domain.services.collection_store import CollectionStore
from sheet_gateway.domain.services.query_engine import find_row_index, to_records
from sheet_gateway.domain.services.schema_registry import SETTINGS_COLLECTION
from sheet_gateway.domain.value_objects.identifiers import as_text
from sheet_gateway.infrastructure.logging import get_logger

logger = get_logger(__name__)

KEY_COLUMN = "key"
VALUE_COLUMN = "value"
UPDATED_COLUMN = "updatedAt"


class SettingsService:
    """Settings are addressed by ``key`` rather than ``id``."""

    def __init__(
        self,
        store: CollectionStore,
        tracker: ChangeTracker | None = None,
        clock: Clock = system_clock,
    ) -> None:
        self._store = store
        self._tracker = tracker
        self._clock = clock

    def _touch(self) -> None:
        if self._tracker is not None:
            self._tracker.touch(SETTINGS_COLLECTION)

    def get_settings(self) -> dict[str, Any]:
        """All settings as ``{now, settings: {key: {value, updatedAt}}}``."""
        dataset = self._store.read_existing(SETTINGS_COLLECTION)
        settings: dict[str, dict[str, Any]] = {}
        for record in to_records(dataset.headers, dataset.rows):
            key = as_text(record.get(KEY_COLUMN))
            if not key:
                continue
            settings[key] = {
                "value": record.get(VALUE_COLUMN, ""),
                "updatedAt": record.get(UPDATED_COLUMN, ""),
            }
        return {"now": iso_timestamp(self._clock()), "settings": settings}

    def update_setting(self, payload: Any) -> dict[str, Any]:
        """Create or replace the setting named by ``payload["key"]``.

        Args:
            payload: ``{"key": ..., "value": ...}``.

        Returns:
            ``{status: "ok", key, value, updatedAt}``.

        Raises:
            ValidationError: If the payload or its key is missing.
        """
        if not isinstance(payload, dict):
            raise ValidationError("Missing data", SETTINGS_COLLECTION)
        key = as_text(payload.get(KEY_COLUMN))
        if not key:
            raise ValidationError("Missing key", SETTINGS_COLLECTION)
        value = payload.get(VALUE_COLUMN, "")
        value = "" if value is None else value
        now = iso_timestamp(self._clock())

        handle = self._store.open(SETTINGS_COLLECTION)
        dataset = self._store.read_all(handle)
        fields = {KEY_COLUMN: key, VALUE_COLUMN: value, UPDATED_COLUMN: now}
        row = find_row_index(dataset.headers, dataset.rows, key, KEY_COLUMN)
        if row >= 0:
            for col, header in enumerate(dataset.headers):
                if header in fields:
                    self._store.set_cell(handle, row, col, fields[header])
        else:
            self._store.append(handle, [fields.get(h, "") for h in dataset.headers])

        self._touch()
        logger.info("setting_updated", key=key, created=row < 0)
        return {"status": "ok", "key": key, "value": value, "updatedAt": now}

    def delete_setting(self, key: str | None) -> dict[str, Any]:
        """Remove the setting named ``key``.

        Raises:
            ValidationError: If no key was given.
            NotFoundError: If no setting has that key.
        """
        if not key:
            raise ValidationError("Missing key", SETTINGS_COLLECTION)
        handle = self._store.open(SETTINGS_COLLECTION)
        dataset = self._store.read_all(handle)
        row = find_row_index(dataset.headers, dataset.rows, key, KEY_COLUMN)
        if row < 0:
            raise NotFoundError("Key not found", SETTINGS_COLLECTION)
        self._store.delete_row(handle, row)
        self._touch()
        logger.info("setting_deleted", key=key)
        return {"status": "deleted", "key": key}
