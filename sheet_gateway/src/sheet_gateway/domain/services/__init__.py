"""Domain services for the gateway.

Services implement the logic that doesn't naturally fit within a single
entity: schemas, collection access, record queries and enrichment.
"""

from sheet_gateway.domain.services.collection_store import CollectionStore
from sheet_gateway.domain.services.enrichment import (
    DEFAULT_RULES,
    EnrichmentEngine,
    Hop,
    LookupRule,
)
from sheet_gateway.domain.services.query_engine import (
    filter_records,
    find_by_id,
    find_row_index,
    matches,
    minimal_view,
    paginate,
    to_records,
)
from sheet_gateway.domain.services.schema_registry import (
    DEFAULT_SCHEMAS,
    FALLBACK_COLUMNS,
    META_COLLECTION,
    SETTINGS_COLLECTION,
    SchemaRegistry,
)

__all__ = [
    "CollectionStore",
    "DEFAULT_RULES",
    "EnrichmentEngine",
    "Hop",
    "LookupRule",
    "filter_records",
    "find_by_id",
    "find_row_index",
    "matches",
    "minimal_view",
    "paginate",
    "to_records",
    "DEFAULT_SCHEMAS",
    "FALLBACK_COLUMNS",
    "META_COLLECTION",
    "SETTINGS_COLLECTION",
    "SchemaRegistry",
]
