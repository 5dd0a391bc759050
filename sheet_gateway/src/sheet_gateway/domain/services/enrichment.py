"""Read-time enrichment (denormalized joins).

The row store has no joins, so display fields from related collections are
computed per request. Each rule names a target field and a chain of hops: start
from a foreign key on the record, look the parent up by id, optionally follow
another foreign key on the parent, and finally read one field.

    Stock.productName = Stock.variantId -> Variants.productId -> Products.name

Every parent collection a rule touches is scanned once per request and
indexed in memory; nothing is cached across requests because any concurrent
writer could invalidate it. Unresolved references decorate with ``""``.
Enrichment works on copies and never fails the read path.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from sheet_gateway.domain.services.collection_store import CollectionStore
from sheet_gateway.domain.services.query_engine import Record, to_records
from sheet_gateway.domain.value_objects.identifiers import ID_COLUMN, as_text
from sheet_gateway.infrastructure.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Hop:
    """Follow ``foreign_key`` on the current record into ``collection``."""

    foreign_key: str
    collection: str


@dataclass(frozen=True, slots=True)
class LookupRule:
    """Decorate ``target`` with ``field`` of the record reached by ``hops``."""

    target: str
    hops: tuple[Hop, ...]
    field: str


_VARIANT_LOOKUPS = (
    LookupRule("variantSku", (Hop("variantId", "Variants"),), "sku"),
    LookupRule("productId", (Hop("variantId", "Variants"),), "productId"),
    LookupRule(
        "productName",
        (Hop("variantId", "Variants"), Hop("productId", "Products")),
        "name",
    ),
)

DEFAULT_RULES: dict[str, tuple[LookupRule, ...]] = {
    "Variants": (LookupRule("productName", (Hop("productId", "Products"),), "name"),),
    "Stock": _VARIANT_LOOKUPS,
    "Purchases": _VARIANT_LOOKUPS,
    "Sales": _VARIANT_LOOKUPS
    + (LookupRule("customerName", (Hop("customerId", "Customers"),), "name"),),
}


class EnrichmentEngine:
    """Decorates records with fields sourced from parent collections."""

    def __init__(
        self,
        store: CollectionStore,
        rules: Mapping[str, tuple[LookupRule, ...]] | None = None,
    ) -> None:
        self._store = store
        self._rules = dict(DEFAULT_RULES if rules is None else rules)

    def rules_for(self, collection: str) -> tuple[LookupRule, ...]:
        return self._rules.get(collection, ())

    def parents_of(self, collection: str) -> set[str]:
        """Parent collections the rules of ``collection`` read."""
        return {hop.collection for rule in self.rules_for(collection) for hop in rule.hops}

    def load_parents(self, collection: str) -> dict[str, dict[str, Record]]:
        """Scan each parent once and index it by id string.

        A parent that cannot be read indexes as empty.
        """
        indexes: dict[str, dict[str, Record]] = {}
        for parent in sorted(self.parents_of(collection)):
            try:
                dataset = self._store.read_existing(parent)
            except Exception:
                logger.warning("enrichment_parent_unreadable", collection=parent, exc_info=True)
                indexes[parent] = {}
                continue
            index: dict[str, Record] = {}
            for record in to_records(dataset.headers, dataset.rows):
                # First occurrence wins, matching id lookup
                index.setdefault(as_text(record.get(ID_COLUMN)), record)
            indexes[parent] = index
        return indexes

    @staticmethod
    def _resolve(
        record: Mapping[str, Any],
        rule: LookupRule,
        indexes: Mapping[str, Mapping[str, Record]],
    ) -> Any:
        current: Mapping[str, Any] | None = record
        for hop in rule.hops:
            if current is None:
                return ""
            key = as_text(current.get(hop.foreign_key))
            current = indexes.get(hop.collection, {}).get(key) if key else None
        if current is None:
            return ""
        value = current.get(rule.field)
        return "" if value is None else value

    def enrich(self, collection: str, records: Iterable[Mapping[str, Any]]) -> list[Record]:
        """Return enriched copies of ``records``.

        Args:
            collection: Collection the records belong to.
            records: Records as read from the store.

        Returns:
            New field maps; the input records are not modified.
        """
        rules = self.rules_for(collection)
        copies = [dict(r) for r in records]
        if not rules or not copies:
            return copies
        indexes = self.load_parents(collection)
        for record in copies:
            for rule in rules:
                record[rule.target] = self._resolve(record, rule, indexes)
        return copies
