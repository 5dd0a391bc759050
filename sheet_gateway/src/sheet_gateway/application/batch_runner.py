"""Sequential batch execution with back-references.

Steps run strictly in order. Before a step runs, its references are replaced
with fields of earlier results. The first failing step stops the run; steps
that already completed stay committed (there is no rollback).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sheet_gateway.application.record_writer import RecordWriter
from sheet_gateway.domain.entities.batch import (
    BatchOperation,
    BatchOperationType,
    BatchResult,
    UnresolvedReferenceError,
)
from sheet_gateway.domain.errors import BatchStepError, GatewayError, ValidationError
from sheet_gateway.domain.value_objects.identifiers import ID_COLUMN
from sheet_gateway.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from sheet_gateway.infrastructure.metrics import MetricsRegistry

logger = get_logger(__name__)


class BatchRunner:
    """Runs batch operations against a RecordWriter."""

    def __init__(self, writer: RecordWriter, metrics: MetricsRegistry | None = None) -> None:
        self._writer = writer
        self._metrics = metrics

    def _count(self, status: str) -> None:
        if self._metrics is not None:
            self._metrics.batch_steps_total.labels(status=status).inc()

    def _execute(
        self, op: BatchOperation, values: list[dict[str, Any]]
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """Run one step; return its wire outcome and the fields it produced."""
        payload, record_id = op.resolve(values)

        if op.type is BatchOperationType.CREATE:
            record = self._writer.create(op.sheet, payload)
            outcome = {**record, "index": op.index, "status": "created", "sheet": op.sheet}
            return outcome, record

        if not record_id:
            raise ValidationError("Missing ID", op.sheet)
        if op.type is BatchOperationType.UPDATE:
            fields = {k: v for k, v in payload.items() if k != ID_COLUMN}
            self._writer.update(op.sheet, record_id, fields)
            status = "updated"
        else:
            self._writer.delete(op.sheet, record_id)
            status = "deleted"
        outcome = {"index": op.index, "status": status, "sheet": op.sheet, "id": record_id}
        return outcome, {ID_COLUMN: record_id}

    def run(self, operations: list[BatchOperation]) -> BatchResult:
        """Execute ``operations`` in order.

        Args:
            operations: Operations built by ``build_batch``.

        Returns:
            The results of the completed steps, plus the failing index and
            reason if a step failed.
        """
        result = BatchResult()
        for op in operations:
            try:
                outcome, values = self._execute(op, result.values)
            except GatewayError as exc:
                reason = exc.message
            except UnresolvedReferenceError as exc:
                reason = str(exc)
            except Exception as exc:
                logger.exception("batch_step_crashed", index=op.index, collection=op.sheet)
                reason = str(exc) or exc.__class__.__name__
            else:
                result.add(outcome, values)
                self._count("success")
                continue

            self._count("failed")
            logger.warning(
                "batch_step_failed",
                index=op.index,
                collection=op.sheet,
                type=op.type.value,
                error=reason,
                completed=len(result.results),
            )
            result.failed_index = op.index
            result.error = BatchStepError(op.index, reason, op.sheet).message
            break

        logger.info(
            "batch_finished",
            status=result.status,
            steps=len(operations),
            completed=len(result.results),
        )
        return result
