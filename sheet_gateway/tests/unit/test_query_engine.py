"""Unit tests for the query engine and the schema registry."""

from __future__ import annotations

import pytest

from sheet_gateway.domain.services import (
    DEFAULT_SCHEMAS,
    FALLBACK_COLUMNS,
    SchemaRegistry,
    filter_records,
    find_by_id,
    find_row_index,
    matches,
    minimal_view,
    paginate,
    to_records,
)

HEADERS = ["id", "name", "category"]
ROWS = [
    [1, "Laptop", "Electronics"],
    ["2", "Desk", "Furniture"],
    [3.0, "Phone", "Electronics"],
    ["4", "Lamp"],
]


@pytest.mark.unit
class TestToRecords:
    """Tests for zipping rows into records."""

    def test_zip(self) -> None:
        records = to_records(HEADERS, ROWS)
        assert records[0] == {"id": 1, "name": "Laptop", "category": "Electronics"}
        assert len(records) == 4

    def test_short_row_padded(self) -> None:
        records = to_records(HEADERS, ROWS)
        assert records[3] == {"id": "4", "name": "Lamp", "category": ""}

    def test_extra_cells_dropped(self) -> None:
        assert to_records(["id"], [["1", "stray"]]) == [{"id": "1"}]


@pytest.mark.unit
class TestIdLookup:
    """Tests for id lookup by string form."""

    def test_find_by_id_matches_numeric_forms(self) -> None:
        records = to_records(HEADERS, ROWS)
        assert find_by_id(records, "1")["name"] == "Laptop"
        assert find_by_id(records, 3)["name"] == "Phone"

    def test_find_by_id_missing(self) -> None:
        assert find_by_id(to_records(HEADERS, ROWS), "99") is None

    def test_first_duplicate_wins(self) -> None:
        records = to_records(["id", "name"], [["1", "first"], ["1", "second"]])
        assert find_by_id(records, "1")["name"] == "first"

    def test_find_row_index(self) -> None:
        assert find_row_index(HEADERS, ROWS, "3") == 2
        assert find_row_index(HEADERS, ROWS, "99") == -1

    def test_find_row_index_other_column(self) -> None:
        assert find_row_index(HEADERS, ROWS, "Desk", "name") == 1

    def test_find_row_index_missing_column(self) -> None:
        assert find_row_index(["key", "value"], [["a", "b"]], "a") == -1


@pytest.mark.unit
class TestFiltering:
    """Tests for equality filters."""

    def test_subset_in_row_order(self) -> None:
        records = to_records(HEADERS, ROWS)
        result = filter_records(records, {"category": "Electronics"})
        assert [r["name"] for r in result] == ["Laptop", "Phone"]

    def test_no_filters_returns_all(self) -> None:
        records = to_records(HEADERS, ROWS)
        assert filter_records(records, {}) == records

    def test_all_filters_must_match(self) -> None:
        records = to_records(HEADERS, ROWS)
        result = filter_records(records, {"category": "Electronics", "name": "Phone"})
        assert [r["id"] for r in result] == [3.0]

    def test_string_form_comparison(self) -> None:
        assert matches({"id": 3.0}, {"id": "3"})
        assert matches({"active": True}, {"active": "true"})

    def test_missing_field_never_matches(self) -> None:
        assert not matches({"id": "1"}, {"color": ""})

    def test_results_are_copies(self) -> None:
        records = to_records(HEADERS, ROWS)
        result = filter_records(records, {"name": "Desk"})
        result[0]["name"] = "changed"
        assert records[1]["name"] == "Desk"


@pytest.mark.unit
class TestPaginate:
    """Tests for offset/limit pagination."""

    def test_no_bounds(self) -> None:
        assert paginate([{"i": 0}, {"i": 1}], None, None) == [{"i": 0}, {"i": 1}]

    def test_offset_and_limit(self) -> None:
        records = [{"i": i} for i in range(10)]
        assert paginate(records, 3, 2) == [{"i": 3}, {"i": 4}]

    def test_offset_past_end(self) -> None:
        assert paginate([{"i": 0}], 5, None) == []


@pytest.mark.unit
class TestMinimalView:
    """Tests for the minimal listing projection."""

    def test_keeps_id_and_set_fields(self) -> None:
        records = [
            {"id": "1", "name": "Widget", "sku": "", "sellingPrice": 9.5, "category": "Tools"},
            {"id": "2", "name": "", "sku": "W-2"},
        ]
        assert minimal_view(records) == [
            {"id": "1", "name": "Widget", "sellingPrice": 9.5},
            {"id": "2", "sku": "W-2"},
        ]


@pytest.mark.unit
class TestSchemaRegistry:
    """Tests for the static schema registry."""

    def test_known_collection(self) -> None:
        registry = SchemaRegistry()
        assert registry.columns_for("Products") == DEFAULT_SCHEMAS["Products"]
        assert registry.columns_for("Products")[0] == "id"

    def test_unknown_collection_falls_back(self) -> None:
        registry = SchemaRegistry()
        assert registry.columns_for("Widgets") == FALLBACK_COLUMNS == ("id", "name")
        assert "Widgets" not in registry

    def test_custom_schemas(self) -> None:
        registry = SchemaRegistry({"Things": ["id", "label"]})
        assert registry.columns_for("Things") == ("id", "label")
        assert registry.has("Things")
        assert not registry.has("Products")
        assert len(registry) == 1

    def test_meta_and_settings_registered(self) -> None:
        registry = SchemaRegistry()
        assert registry.columns_for("__Meta__") == ("sheetName", "lastUpdated")
        assert registry.columns_for("Settings") == ("key", "value", "updatedAt")
