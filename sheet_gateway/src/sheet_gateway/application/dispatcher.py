"""GatewayDispatcher application service.

This is the single entry point of the gateway: it maps an action name to a
handler, runs it, and turns every handler-level failure into an error body.
Inbound adapters only decode parameters into a GatewayRequest and encode the
returned body.

Usage:
    from sheet_gateway.infrastructure.container import build_dispatcher

    dispatcher = build_dispatcher()
    body = dispatcher.dispatch(GatewayRequest(action="get", sheet="Products"))
"""

from __future__ import annotations

import hmac
import time
from typing import TYPE_CHECKING, Any, Callable

from sheet_gateway.application.batch_runner import BatchRunner
from sheet_gateway.application.record_writer import RecordWriter
from sheet_gateway.application.settings import SettingsService
from sheet_gateway.application.sync import SyncService
from sheet_gateway.domain.entities.batch import build_batch
from sheet_gateway.domain.errors import (
    GatewayError,
    UnauthorizedError,
    UnknownActionError,
    ValidationError,
)
from sheet_gateway.domain.services.collection_store import CollectionStore
from sheet_gateway.domain.services.enrichment import EnrichmentEngine
from sheet_gateway.domain.services.query_engine import (
    Record,
    filter_records,
    find_by_id,
    minimal_view,
    paginate,
    to_records,
)
from sheet_gateway.domain.value_objects.identifiers import ID_COLUMN, as_text
from sheet_gateway.domain.value_objects.request import Action, GatewayRequest
from sheet_gateway.infrastructure.logging import bind_request_context, get_logger
from sheet_gateway.infrastructure.tracing import mark_failed, request_span

if TYPE_CHECKING:
    from sheet_gateway.infrastructure.metrics import MetricsRegistry

logger = get_logger(__name__)

Handler = Callable[[GatewayRequest], Any]


class GatewayDispatcher:
    """Routes gateway requests to CRUD, batch, sync and settings handlers.

    Implements the GatewayPort protocol.
    """

    def __init__(
        self,
        store: CollectionStore,
        writer: RecordWriter,
        enrichment: EnrichmentEngine,
        batch_runner: BatchRunner,
        sync: SyncService,
        settings: SettingsService,
        shared_secret: str | None = None,
        max_batch_operations: int | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            store: Collection store used by reads.
            writer: Record writer used by create/update/delete.
            enrichment: Read-time enrichment engine.
            batch_runner: Runner for ``batch``.
            sync: Sync snapshot service.
            settings: Settings service.
            shared_secret: When set, every request must carry it as ``token``.
            max_batch_operations: Optional upper bound on batch size.
            metrics: Optional metrics registry.
        """
        self._store = store
        self._writer = writer
        self._enrichment = enrichment
        self._batch_runner = batch_runner
        self._sync = sync
        self._settings = settings
        self._shared_secret = shared_secret or None
        self._max_batch_operations = max_batch_operations
        self._metrics = metrics

        self._handlers: dict[Action, Handler] = {
            Action.GET: self._handle_get,
            Action.CREATE: self._handle_create,
            Action.UPDATE: self._handle_update,
            Action.DELETE: self._handle_delete,
            Action.BATCH: self._handle_batch,
            Action.SYNC_ALL: lambda request: self._sync.sync_all(),
            Action.SYNC_CHANGES: lambda request: self._sync.sync_changes(request.since),
            Action.GET_SETTINGS: lambda request: self._settings.get_settings(),
            Action.UPDATE_SETTING: lambda request: self._settings.update_setting(request.payload),
            Action.DELETE_SETTING: self._handle_delete_setting,
        }

    # =========================================================================
    # Entry point
    # =========================================================================

    def dispatch(self, request: GatewayRequest) -> Any:
        """Run the action named by ``request``.

        Args:
            request: Decoded request.

        Returns:
            The handler's body, or ``{"error": ..., "sheet": ...}`` on failure.
        """
        bind_request_context(action=request.action, sheet=request.sheet)
        start = time.perf_counter()
        status = "success"

        with request_span(request.action, request.sheet) as span:
            try:
                self._authorize(request)
                handler = self._resolve(request.action)
                body = handler(request)
            except GatewayError as exc:
                status = "error"
                body = exc.to_body()
                mark_failed(span, exc.message)
                logger.info("request_rejected", error=exc.message, kind=type(exc).__name__)
            except Exception as exc:
                status = "error"
                body = {"error": str(exc) or exc.__class__.__name__}
                mark_failed(span, body["error"])
                logger.exception("request_failed")
            else:
                span.set_attribute("gateway.status", status)

        if self._metrics is not None:
            self._metrics.requests_total.labels(action=request.action, status=status).inc()
            self._metrics.request_latency_seconds.labels(action=request.action).observe(
                time.perf_counter() - start
            )
        return body

    def _authorize(self, request: GatewayRequest) -> None:
        if self._shared_secret is None:
            return
        presented = (request.token or "").encode()
        if not hmac.compare_digest(presented, self._shared_secret.encode()):
            raise UnauthorizedError()

    def _resolve(self, action: str) -> Handler:
        try:
            return self._handlers[Action(action)]
        except ValueError as exc:
            raise UnknownActionError(action) from exc

    # =========================================================================
    # Reads
    # =========================================================================

    def _enrich(self, sheet: str, records: list[Record]) -> list[Record]:
        try:
            return self._enrichment.enrich(sheet, records)
        except Exception:
            logger.warning("enrichment_failed", collection=sheet, exc_info=True)
            return records

    def _handle_get(self, request: GatewayRequest) -> Any:
        handle = self._store.open(request.sheet)
        dataset = self._store.read_all(handle)
        if dataset.is_empty:
            return {} if request.record_id is not None else []
        records = to_records(dataset.headers, dataset.rows)

        if request.record_id is not None:
            record = find_by_id(records, request.record_id)
            if record is None:
                return {}
            return self._enrich(request.sheet, [record])[0]

        # Filters may name denormalized fields, so enrichment runs first
        selected = filter_records(self._enrich(request.sheet, records), request.filters)
        if request.minimal:
            selected = minimal_view(selected)
        return paginate(selected, request.offset, request.limit)

    # =========================================================================
    # Writes
    # =========================================================================

    @staticmethod
    def _require_payload(request: GatewayRequest) -> dict[str, Any]:
        if not isinstance(request.payload, dict):
            raise ValidationError("Missing data", request.sheet)
        return request.payload

    def _handle_create(self, request: GatewayRequest) -> dict[str, Any]:
        payload = self._require_payload(request)
        record = self._writer.create(request.sheet, payload)
        return {"status": "success", "id": record[ID_COLUMN], "sheet": request.sheet}

    def _handle_update(self, request: GatewayRequest) -> dict[str, Any]:
        payload = request.payload if isinstance(request.payload, dict) else None
        record_id = request.record_id
        if not record_id and payload is not None:
            record_id = as_text(payload.get(ID_COLUMN)) or None
        if not record_id or payload is None:
            raise ValidationError("Missing ID or data", request.sheet)
        fields = {k: v for k, v in payload.items() if k != ID_COLUMN}
        self._writer.update(request.sheet, record_id, fields)
        return {"status": "updated", "id": record_id}

    def _handle_delete(self, request: GatewayRequest) -> dict[str, Any]:
        if not request.record_id:
            raise ValidationError("Missing ID", request.sheet)
        self._writer.delete(request.sheet, request.record_id)
        return {"status": "deleted", "id": request.record_id}

    def _handle_batch(self, request: GatewayRequest) -> dict[str, Any]:
        operations = build_batch(request.payload, self._max_batch_operations)
        return self._batch_runner.run(operations).to_body()

    def _handle_delete_setting(self, request: GatewayRequest) -> dict[str, Any]:
        key = request.key
        if key is None and isinstance(request.payload, dict):
            key = as_text(request.payload.get("key")) or None
        return self._settings.delete_setting(key)
