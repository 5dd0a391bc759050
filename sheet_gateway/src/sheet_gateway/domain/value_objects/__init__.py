"""Value objects for the gateway domain.

Exports:
    Identifiers:
        - Ref: Typed reference to an earlier batch result field
        - as_text: Wire string form of a cell value
        - numeric_id: Numeric interpretation of an id cell
        - ID_COLUMN, CREATED_AT_COLUMN, UPDATED_AT_COLUMN: Reserved columns

    Requests:
        - Action: Actions understood by the dispatcher
        - GatewayRequest: Decoded request
        - RESERVED_KEYS: Query keys excluded from equality filters
        - decode_payload: JSON payload decoder
"""

from sheet_gateway.domain.value_objects.identifiers import (
    CREATED_AT_COLUMN,
    ID_COLUMN,
    UPDATED_AT_COLUMN,
    Ref,
    as_text,
    numeric_id,
)
from sheet_gateway.domain.value_objects.request import (
    RESERVED_KEYS,
    Action,
    GatewayRequest,
    decode_payload,
)

__all__ = [
    "CREATED_AT_COLUMN",
    "ID_COLUMN",
    "UPDATED_AT_COLUMN",
    "Ref",
    "as_text",
    "numeric_id",
    "RESERVED_KEYS",
    "Action",
    "GatewayRequest",
    "decode_payload",
]
