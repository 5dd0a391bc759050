"""Decoded gateway requests.

The gateway has a single entry point driven by flat string parameters. This
module turns those parameters into a GatewayRequest: the action, the target
collection, the decoded payload, the equality filters and the transport
options. Payload decoding happens here, before any handler runs, so a payload
that cannot be decoded never reaches the dispatcher.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping
from urllib.parse import unquote

from sheet_gateway.domain.errors import MalformedPayloadError


class Action(str, Enum):
    """Actions understood by the dispatcher."""

    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    BATCH = "batch"
    SYNC_ALL = "syncAll"
    SYNC_CHANGES = "syncChanges"
    GET_SETTINGS = "getSettings"
    UPDATE_SETTING = "updateSetting"
    DELETE_SETTING = "deleteSetting"


# Query keys that are never treated as equality filters.
RESERVED_KEYS = frozenset(
    {
        "sheet",
        "id",
        "action",
        "data",
        "callback",
        "window",
        "interval",
        "t",
        "token",
        "offset",
        "limit",
        "minimal",
        "since",
        "key",
    }
)


def decode_payload(raw: str | None) -> Any:
    """Decode an encoded JSON payload.

    Clients send either URI-encoded JSON or raw JSON; both are accepted.

    Args:
        raw: The ``data`` parameter.

    Returns:
        The decoded value, or None when no payload was sent.

    Raises:
        MalformedPayloadError: If the payload is not valid JSON either way.
    """
    if raw is None or raw == "":
        return None
    try:
        return json.loads(unquote(raw))
    except ValueError:
        pass
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise MalformedPayloadError("Invalid JSON data") from exc


def _parse_int(params: Mapping[str, str], name: str) -> int | None:
    raw = (params.get(name) or "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError as exc:
        raise MalformedPayloadError(f"Invalid {name}: {raw}") from exc
    if value < 0:
        raise MalformedPayloadError(f"Invalid {name}: {raw}")
    return value


@dataclass
class GatewayRequest:
    """A decoded request.

    Attributes:
        action: Raw action name (validated by the dispatcher).
        sheet: Target collection.
        record_id: Target record id, if any.
        payload: Decoded ``data`` parameter.
        filters: Non-reserved parameters, used as equality filters by ``get``.
        callback: Callback name for the script transport.
        window: Global variable name for the script transport.
        interval: Re-poll interval in milliseconds (with ``window``).
        offset: List pagination offset.
        limit: List pagination size.
        minimal: Project list results to id, name, sku and sellingPrice.
        since: ISO timestamp for ``syncChanges``.
        key: Settings key for ``deleteSetting``.
        token: Shared secret presented by the caller.
        params: All raw parameters, kept for re-poll URLs.
    """

    action: str = Action.GET.value
    sheet: str = "Products"
    record_id: str | None = None
    payload: Any = None
    filters: dict[str, str] = field(default_factory=dict)
    callback: str | None = None
    window: str | None = None
    interval: int = 0
    offset: int | None = None
    limit: int | None = None
    minimal: bool = False
    since: str | None = None
    key: str | None = None
    token: str | None = None
    params: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, str],
        default_sheet: str = "Products",
        body: Any = None,
    ) -> GatewayRequest:
        """Build a request from flat query parameters.

        Args:
            params: Query parameters (single-valued).
            default_sheet: Collection used when ``sheet`` is omitted.
            body: Already-decoded payload (a JSON request body). When given it
                is used as-is instead of decoding the ``data`` parameter.

        Returns:
            The decoded request.

        Raises:
            MalformedPayloadError: If ``data`` or a numeric option is malformed.
        """
        raw = {str(k): str(v) for k, v in params.items()}
        record_id = raw.get("id") or None
        return cls(
            action=raw.get("action") or Action.GET.value,
            sheet=raw.get("sheet") or default_sheet,
            record_id=record_id,
            payload=decode_payload(raw.get("data")) if body is None else body,
            filters={k: v for k, v in raw.items() if k not in RESERVED_KEYS},
            callback=raw.get("callback") or None,
            window=raw.get("window") or None,
            interval=_parse_int(raw, "interval") or 0,
            offset=_parse_int(raw, "offset"),
            limit=_parse_int(raw, "limit"),
            minimal=raw.get("minimal", "").lower() == "true",
            since=raw.get("since") or None,
            key=raw.get("key") or None,
            token=raw.get("token") or None,
            params=raw,
        )
