"""Unit tests for record writes and change tracking."""

from __future__ import annotations

import pytest

from sheet_gateway.adapters.outbound.memory_row_store import InMemoryRowStore
from sheet_gateway.application import ChangeTracker, RecordWriter, next_id
from sheet_gateway.domain.entities.dataset import Dataset
from sheet_gateway.domain.errors import DuplicateIdError, NotFoundError, ValidationError
from sheet_gateway.domain.services import CollectionStore


@pytest.fixture
def tracker(collection_store: CollectionStore, clock) -> ChangeTracker:
    return ChangeTracker(collection_store, clock)


@pytest.fixture
def writer(collection_store: CollectionStore, tracker: ChangeTracker, clock) -> RecordWriter:
    return RecordWriter(collection_store, tracker, clock)


def rows_of(store: CollectionStore, name: str) -> list[list]:
    return store.read_existing(name).rows


@pytest.mark.unit
class TestNextId:
    """Tests for id generation."""

    def test_empty(self) -> None:
        assert next_id(Dataset(headers=["id", "name"])) == "1"

    def test_max_plus_one(self) -> None:
        dataset = Dataset(headers=["id"], rows=[["3"], [7], [5.0]])
        assert next_id(dataset) == "8"

    def test_non_numeric_ignored(self) -> None:
        dataset = Dataset(headers=["id"], rows=[["SKU-9"], ["2"], [""]])
        assert next_id(dataset) == "3"

    def test_max_not_last_row(self) -> None:
        """Rows deleted or reordered do not matter; the maximum does."""
        dataset = Dataset(headers=["id"], rows=[["10"], ["4"]])
        assert next_id(dataset) == "11"


@pytest.mark.unit
class TestCreate:
    """Tests for RecordWriter.create."""

    def test_generated_id_and_timestamps(self, writer: RecordWriter) -> None:
        record = writer.create("Products", {"name": "Widget"})
        assert record["id"] == "1"
        assert record["name"] == "Widget"
        assert record["category"] == ""
        assert record["createdAt"] == record["updatedAt"]
        assert record["createdAt"].endswith("Z")

    def test_row_follows_header_order(
        self, writer: RecordWriter, collection_store: CollectionStore
    ) -> None:
        writer.create("Widgets", {"name": "Gear", "ignored": "x"})
        assert rows_of(collection_store, "Widgets") == [["1", "Gear"]]

    def test_supplied_id_kept_as_text(self, writer: RecordWriter) -> None:
        assert writer.create("Widgets", {"id": 42, "name": "Gear"})["id"] == "42"

    def test_payload_timestamps_overridden(self, writer: RecordWriter) -> None:
        record = writer.create("Products", {"name": "Widget", "createdAt": "1999-01-01"})
        assert record["createdAt"] != "1999-01-01"

    def test_duplicate_rejected_without_side_effect(
        self,
        writer: RecordWriter,
        collection_store: CollectionStore,
        row_store: InMemoryRowStore,
    ) -> None:
        writer.create("Widgets", {"id": "5", "name": "Gear"})
        row_store.calls.clear()
        with pytest.raises(DuplicateIdError):
            writer.create("Widgets", {"id": 5, "name": "Copy"})
        assert "append_row" not in row_store.calls
        assert rows_of(collection_store, "Widgets") == [["5", "Gear"]]

    def test_duplicate_allowed_by_policy(
        self, collection_store: CollectionStore, clock
    ) -> None:
        writer = RecordWriter(collection_store, None, clock, duplicate_ids="allow")
        writer.create("Widgets", {"id": "5", "name": "Gear"})
        writer.create("Widgets", {"id": "5", "name": "Copy"})
        assert len(rows_of(collection_store, "Widgets")) == 2

    def test_collection_without_id_column(self, writer: RecordWriter) -> None:
        with pytest.raises(ValidationError):
            writer.create("Settings", {"key": "currency", "value": "INR"})


@pytest.mark.unit
class TestUpdate:
    """Tests for RecordWriter.update."""

    def test_only_present_columns_change(
        self, writer: RecordWriter, collection_store: CollectionStore
    ) -> None:
        created = writer.create("Products", {"name": "Widget", "category": "Tools"})
        written = writer.update("Products", "1", {"category": "Hardware", "bogus": "x"})
        assert written == ["category", "updatedAt"]

        dataset = collection_store.read_existing("Products")
        record = dict(zip(dataset.headers, dataset.rows[0]))
        assert record["name"] == "Widget"
        assert record["category"] == "Hardware"
        assert record["createdAt"] == created["createdAt"]
        assert record["updatedAt"] > created["updatedAt"]

    def test_id_and_created_at_protected(
        self, writer: RecordWriter, collection_store: CollectionStore
    ) -> None:
        created = writer.create("Products", {"name": "Widget"})
        writer.update("Products", "1", {"id": "99", "createdAt": "1999-01-01"})
        dataset = collection_store.read_existing("Products")
        record = dict(zip(dataset.headers, dataset.rows[0]))
        assert record["id"] == "1"
        assert record["createdAt"] == created["createdAt"]

    def test_one_cell_write_per_column(
        self, writer: RecordWriter, row_store: InMemoryRowStore
    ) -> None:
        writer.create("Products", {"name": "Widget"})
        row_store.calls.clear()
        writer.update("Products", "1", {"name": "Gadget", "category": "Tools"})
        # name, category and updatedAt on the record, lastUpdated on the meta row
        assert row_store.calls.count("set_value") == 4

    def test_missing_id(self, writer: RecordWriter) -> None:
        writer.create("Products", {"name": "Widget"})
        with pytest.raises(NotFoundError):
            writer.update("Products", "404", {"name": "x"})


@pytest.mark.unit
class TestDelete:
    """Tests for RecordWriter.delete."""

    def test_removes_matching_row_only(
        self, writer: RecordWriter, collection_store: CollectionStore
    ) -> None:
        for name in ("a", "b", "c"):
            writer.create("Widgets", {"name": name})
        writer.delete("Widgets", "2")
        assert rows_of(collection_store, "Widgets") == [["1", "a"], ["3", "c"]]

    def test_missing_id(self, writer: RecordWriter) -> None:
        with pytest.raises(NotFoundError):
            writer.delete("Widgets", "1")


@pytest.mark.unit
class TestChangeTracker:
    """Tests for the meta collection."""

    def test_mutations_touch_meta(
        self, writer: RecordWriter, tracker: ChangeTracker
    ) -> None:
        writer.create("Products", {"name": "Widget"})
        first = tracker.last_updated()["Products"]
        writer.update("Products", "1", {"name": "Gadget"})
        second = tracker.last_updated()["Products"]
        assert first is not None
        assert second > first

    def test_one_meta_row_per_collection(
        self, writer: RecordWriter, collection_store: CollectionStore
    ) -> None:
        writer.create("Products", {"name": "a"})
        writer.create("Products", {"name": "b"})
        writer.create("Widgets", {"name": "c"})
        names = [row[0] for row in rows_of(collection_store, "__Meta__")]
        assert names == ["Products", "Widgets"]

    def test_disabled(self, collection_store: CollectionStore, clock) -> None:
        tracker = ChangeTracker(collection_store, clock, enabled=False)
        RecordWriter(collection_store, tracker, clock).create("Products", {"name": "x"})
        assert tracker.last_updated() == {}

    def test_failed_mutation_does_not_touch(
        self, writer: RecordWriter, tracker: ChangeTracker
    ) -> None:
        with pytest.raises(NotFoundError):
            writer.delete("Products", "1")
        assert "Products" not in tracker.last_updated()
