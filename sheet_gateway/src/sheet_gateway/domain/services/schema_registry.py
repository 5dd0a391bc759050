"""Static collection schemas.

Column order is load-bearing: the row store keeps rows as positional value
lists, so the header row written when a collection is provisioned fixes where
every field lives.
"""

from __future__ import annotations

from typing import Mapping

FALLBACK_COLUMNS: tuple[str, ...] = ("id", "name")

META_COLLECTION = "__Meta__"
SETTINGS_COLLECTION = "Settings"

DEFAULT_SCHEMAS: dict[str, tuple[str, ...]] = {
    "Products": (
        "id", "name", "category", "description", "barcode", "type", "baseUnit",
        "hasVariants", "defaultCostPrice", "defaultSellingPrice",
        "createdAt", "updatedAt",
    ),
    "Variants": (
        "id", "productId", "sku", "attributes", "unit",
        "costPrice", "sellingPrice", "createdAt", "updatedAt",
    ),
    "Customers": (
        "id", "name", "phone", "email", "address",
        "notes", "gstNumber", "outstandingBalance",
        "createdAt", "updatedAt",
    ),
    "Stock": (
        "id", "variantId", "quantity", "unit", "batchCode",
        "metadata", "location", "updatedAt",
    ),
    "StockMovements": (
        "id", "variantId", "change", "unit", "type", "refId", "createdAt",
    ),
    "Orders": (
        "id", "customerId", "totalAmount", "paymentMethod",
        "date", "notes", "createdAt",
    ),
    "Sales": (
        "id", "orderId", "variantId", "quantity", "unit",
        "sellingPrice", "total", "date", "customerId", "paymentMethod",
    ),
    "Purchases": (
        "id", "variantId", "supplierId", "quantity", "unit",
        "costPrice", "total", "date", "invoiceNumber",
    ),
    "Suppliers": (
        "id", "name", "contactPerson", "phone", "email",
        "address", "notes", "createdAt", "updatedAt",
    ),
    # Keyed by `key`, not `id`; served by the settings actions.
    SETTINGS_COLLECTION: ("key", "value", "updatedAt"),
    META_COLLECTION: ("sheetName", "lastUpdated"),
}


class SchemaRegistry:
    """Collection name to ordered column list."""

    def __init__(self, schemas: Mapping[str, tuple[str, ...] | list[str]] | None = None) -> None:
        """Initialize the registry.

        Args:
            schemas: Schemas to register. Defaults to DEFAULT_SCHEMAS.
        """
        source = DEFAULT_SCHEMAS if schemas is None else schemas
        self._schemas: dict[str, tuple[str, ...]] = {
            name: tuple(columns) for name, columns in source.items()
        }

    def columns_for(self, name: str) -> tuple[str, ...]:
        """Ordered columns for a collection; ``("id", "name")`` if unknown."""
        return self._schemas.get(name, FALLBACK_COLUMNS)

    def has(self, name: str) -> bool:
        return name in self._schemas

    def names(self) -> list[str]:
        return list(self._schemas)

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)
