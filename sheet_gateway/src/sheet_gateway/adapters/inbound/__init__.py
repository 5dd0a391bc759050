"""Inbound adapters for the gateway.

Inbound adapters decode incoming requests into GatewayRequest values and
encode the dispatcher's bodies for the requested transport.

Exports:
    REST API:
        - create_app: Create a FastAPI application
        - run_server: Run the HTTP server
    Response encoding:
        - encode_response: Plain JSON, callback or window-assignment script
        - EncodedResponse: Encoded body plus media type
        - validate_transport: Reject unsafe callback/window names
"""

from sheet_gateway.adapters.inbound.response_encoder import (
    EncodedResponse,
    encode_response,
    repoll_url,
    script_safe_json,
    validate_transport,
)
from sheet_gateway.adapters.inbound.rest_api import create_app, run_server

__all__ = [
    # REST API
    "create_app",
    "run_server",
    # Response encoding
    "EncodedResponse",
    "encode_response",
    "repoll_url",
    "script_safe_json",
    "validate_transport",
]
