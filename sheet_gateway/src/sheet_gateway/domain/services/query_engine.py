"""Record materialization, id lookup and equality filtering.

Records are plain field maps built by zipping a header row with a positional
row. Values keep their native types; matching always compares string forms
(see ``as_text``) so that ``1``, ``1.0`` and ``"1"`` all address the same id.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from sheet_gateway.domain.value_objects.identifiers import ID_COLUMN, as_text

Record = dict[str, Any]


def to_records(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> list[Record]:
    """Zip positional rows into field maps.

    Short rows are padded with ``""``; cells beyond the header are dropped.

    Args:
        headers: Header row.
        rows: Data rows.

    Returns:
        One record per row, in row order.
    """
    records = []
    for row in rows:
        records.append(
            {h: (row[i] if i < len(row) else "") for i, h in enumerate(headers)}
        )
    return records


def find_by_id(records: Iterable[Mapping[str, Any]], record_id: Any) -> Record | None:
    """First record whose id matches, or None.

    Duplicate ids are not guarded; the first match wins.
    """
    wanted = as_text(record_id)
    for record in records:
        if as_text(record.get(ID_COLUMN)) == wanted:
            return dict(record)
    return None


def find_row_index(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    value: Any,
    column: str = ID_COLUMN,
) -> int:
    """Position of the first row whose ``column`` matches ``value``.

    Args:
        headers: Header row.
        rows: Data rows.
        value: Value to match (string form).
        column: Column to compare.

    Returns:
        Zero-based data row index, or -1 when absent.
    """
    if column not in headers:
        return -1
    col = list(headers).index(column)
    wanted = as_text(value)
    for i, row in enumerate(rows):
        cell = row[col] if col < len(row) else ""
        if as_text(cell) == wanted:
            return i
    return -1


def matches(record: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    """True if every filter equals the record's field by string form.

    A field missing from the record never matches.
    """
    for key, value in filters.items():
        if key not in record:
            return False
        if as_text(record[key]) != as_text(value):
            return False
    return True


def filter_records(
    records: Iterable[Mapping[str, Any]],
    filters: Mapping[str, Any],
) -> list[Record]:
    """Records matching all filters, preserving their original order."""
    if not filters:
        return [dict(r) for r in records]
    return [dict(r) for r in records if matches(r, filters)]


def paginate(records: list[Record], offset: int | None, limit: int | None) -> list[Record]:
    """Slice a record list by offset and limit (both optional)."""
    start = offset or 0
    if limit is None:
        return records[start:]
    return records[start:start + limit]


# Fields kept by a minimal listing, besides the id, when they are non-empty.
MINIMAL_FIELDS = ("name", "sku", "sellingPrice")


def minimal_view(records: Iterable[Mapping[str, Any]]) -> list[Record]:
    """Project records to ``id`` plus whichever MINIMAL_FIELDS are set."""
    projected = []
    for record in records:
        view: Record = {ID_COLUMN: record.get(ID_COLUMN, "")}
        for name in MINIMAL_FIELDS:
            if record.get(name) not in (None, ""):
                view[name] = record[name]
        projected.append(view)
    return projected
