"""HTTP adapter for the gateway.

This module provides a FastAPI application exposing the gateway's single
parameter-driven endpoint.

Endpoints:
    GET  /exec - Run an action (all inputs are query parameters)
    POST /exec - Same; a JSON body supplies ``data`` when the query has none
    GET /health - Health check
    GET /metrics - Prometheus exposition

Usage:
    from sheet_gateway.adapters.inbound.rest_api import create_app
    from sheet_gateway.infrastructure.container import build_dispatcher

    app = create_app(build_dispatcher())
    # Run with uvicorn: uvicorn app:app --host 0.0.0.0 --port 8080

References:
    - FastAPI documentation: https://fastapi.tiangolo.com/
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST
from pydantic import BaseModel, Field

from sheet_gateway import __version__
from sheet_gateway.adapters.inbound.response_encoder import (
    JSON_MEDIA_TYPE,
    encode_response,
    to_json,
    validate_transport,
)
from sheet_gateway.domain.errors import MalformedPayloadError
from sheet_gateway.domain.value_objects.request import GatewayRequest
from sheet_gateway.infrastructure.config import Config, get_config
from sheet_gateway.infrastructure.logging import get_logger
from sheet_gateway.infrastructure.metrics import MetricsRegistry
from sheet_gateway.ports.inbound import GatewayPort

logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")


async def _read_body(request: Request, params: dict[str, str]) -> Any:
    """Decode a JSON POST body, unless the query already carries ``data``.

    The body is plain JSON, so it is decoded once here and never goes through
    the URI-decoding applied to the ``data`` query parameter.
    """
    if request.method != "POST" or params.get("data"):
        return None
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise MalformedPayloadError("Invalid JSON data") from exc


def create_app(
    dispatcher: GatewayPort,
    config: Config | None = None,
    metrics: MetricsRegistry | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        dispatcher: Gateway entry point implementing GatewayPort
        config: Configuration; defaults to ``get_config()``
        metrics: Registry rendered by ``/metrics``

    Returns:
        Configured FastAPI application
    """
    config = config or get_config()

    app = FastAPI(
        title="Sheet Gateway API",
        description="CRUD gateway over a spreadsheet-style row store",
        version=__version__,
    )

    # Script-tag clients load /exec cross-origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=__version__)

    @app.get("/metrics")
    async def metrics_endpoint() -> Response:
        """Prometheus exposition of the gateway registry."""
        if metrics is None:
            return Response(status_code=404)
        return Response(content=metrics.render(), media_type=CONTENT_TYPE_LATEST)

    @app.api_route("/exec", methods=["GET", "POST"])
    async def execute(request: Request) -> Response:
        """Decode the parameters, dispatch, and encode for the requested transport."""
        try:
            params = dict(request.query_params)
            posted = await _read_body(request, params)
            gateway_request = GatewayRequest.from_params(
                params, default_sheet=config.gateway.default_collection, body=posted
            )
            validate_transport(gateway_request)
        except MalformedPayloadError as exc:
            logger.info("request_malformed", error=exc.message)
            return Response(
                content=to_json(exc.to_body()),
                status_code=400,
                media_type=JSON_MEDIA_TYPE,
            )

        body: Any = await run_in_threadpool(dispatcher.dispatch, gateway_request)
        base_url = str(request.url.replace(query=""))
        encoded = encode_response(body, gateway_request, base_url)
        return Response(content=encoded.content, media_type=encoded.media_type)

    return app


def run_server(
    dispatcher: GatewayPort,
    config: Config | None = None,
    metrics: MetricsRegistry | None = None,
) -> None:
    """Run the HTTP server.

    Args:
        dispatcher: Gateway entry point.
        config: Configuration (host and port).
        metrics: Registry rendered by ``/metrics``.
    """
    import uvicorn

    config = config or get_config()
    app = create_app(dispatcher, config, metrics)
    uvicorn.run(app, host=config.server.host, port=config.server.port)


def main() -> None:
    """Console entry point: configure observability, wire, serve."""
    from sheet_gateway.infrastructure.container import build_dispatcher
    from sheet_gateway.infrastructure.logging import setup_logging
    from sheet_gateway.infrastructure.metrics import get_metrics, setup_metrics
    from sheet_gateway.infrastructure.tracing import setup_tracing

    config = get_config()
    setup_logging(config.observability)
    if config.observability.otel_endpoint:
        setup_tracing(config.observability)
    if config.observability.metrics_enabled:
        metrics = setup_metrics(config.server.metrics_port, backend=config.store.backend)
    else:
        metrics = get_metrics()

    dispatcher = build_dispatcher(config, metrics)
    logger.info(
        "gateway_starting",
        host=config.server.host,
        port=config.server.port,
        backend=config.store.backend,
    )
    run_server(dispatcher, config, metrics)


if __name__ == "__main__":
    main()
