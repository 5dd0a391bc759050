"""Response encoding for the gateway transports.

A body is sent as one of:

- plain JSON (the default);
- a callback invocation ``name(<json>);`` for script-tag clients;
- a global assignment ``window["name"] = <json>;``, optionally followed by a
  timer that re-requests the same query after ``interval`` milliseconds so the
  page keeps itself fresh by reloading the script.

The body itself is never transformed. JSON embedded in a script is escaped so
that it cannot close the surrounding ``<script>`` tag.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import urlencode

from sheet_gateway.domain.errors import MalformedPayloadError
from sheet_gateway.domain.value_objects.request import Action, GatewayRequest

JSON_MEDIA_TYPE = "application/json"
SCRIPT_MEDIA_TYPE = "application/javascript"

_CALLBACK_PATTERN = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")

# Parameters that never carry over into a re-poll URL.
_REPOLL_DROPPED = frozenset({"t", "callback"})


@dataclass(frozen=True, slots=True)
class EncodedResponse:
    """Encoded body plus its media type."""

    content: str
    media_type: str


def validate_transport(request: GatewayRequest) -> None:
    """Reject callback or window names that are not JavaScript identifiers.

    Raises:
        MalformedPayloadError: If a name is unsafe to emit into a script.
    """
    for param, name in (("callback", request.callback), ("window", request.window)):
        if name is not None and not _CALLBACK_PATTERN.match(name):
            raise MalformedPayloadError(f"Invalid {param} name")


def to_json(body: Any) -> str:
    """Serialize ``body`` compactly."""
    return json.dumps(body, ensure_ascii=False, separators=(",", ":"), default=str)


def script_safe_json(body: Any) -> str:
    """Serialize ``body`` for embedding in an inline script."""
    return (
        to_json(body)
        .replace("</", "<\\/")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def repoll_url(base_url: str, params: Mapping[str, str]) -> str:
    """URL that re-requests the same query, without the cache-buster.

    The action is forced to ``get``; the caller appends ``&t=<now>``.
    """
    query = {k: v for k, v in params.items() if k not in _REPOLL_DROPPED}
    query["action"] = Action.GET.value
    return f"{base_url}?{urlencode(query)}"


def encode_response(
    body: Any,
    request: GatewayRequest,
    base_url: str = "",
) -> EncodedResponse:
    """Encode ``body`` for the transport the request asked for.

    Args:
        body: Dispatcher result.
        request: The request the body answers.
        base_url: Endpoint URL used for re-poll scripts.

    Returns:
        The encoded response.
    """
    if request.callback:
        return EncodedResponse(f"{request.callback}({script_safe_json(body)});", SCRIPT_MEDIA_TYPE)

    if not request.window:
        return EncodedResponse(to_json(body), JSON_MEDIA_TYPE)

    script = f"window[{script_safe_json(request.window)}] = {script_safe_json(body)};"
    if request.interval > 0:
        url = script_safe_json(repoll_url(base_url, request.params))
        script += (
            "\nsetTimeout(function () {"
            "\n  var s = document.createElement(\"script\");"
            f"\n  s.src = {url} + \"&t=\" + Date.now();"
            "\n  document.body.appendChild(s);"
            f"\n}}, {request.interval});"
        )
    return EncodedResponse(script, SCRIPT_MEDIA_TYPE)
