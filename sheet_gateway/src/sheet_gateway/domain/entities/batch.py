"""Batch operations and batch results.

A batch arrives on the wire as ``{"operations": [...]}`` where each operation
is ``{"type" | "action": "create", "sheet": "Sales", "data": {...}}``. Payload
values of the form ``__REF(k).field__`` refer to a field of the record written
by operation ``k``. References are parsed into typed Ref values when the batch is
built, and a reference that does not point strictly backwards rejects the
whole batch before anything runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from sheet_gateway.domain.errors import MalformedPayloadError
from sheet_gateway.domain.value_objects.identifiers import Ref, as_text


class BatchOperationType(str, Enum):
    """Kinds of batch steps."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class UnresolvedReferenceError(LookupError):
    """A reference points at a field the earlier result does not carry."""


def _parse_value(value: Any, index: int) -> Any:
    ref = Ref.parse(value)
    if ref is None:
        return value
    if ref.operation_index >= index:
        raise MalformedPayloadError(
            f"Operation {index} references operation {ref.operation_index}; "
            "references must point to an earlier operation"
        )
    return ref


@dataclass
class BatchOperation:
    """One step of a batch.

    Attributes:
        index: Position in the batch.
        type: Kind of write.
        sheet: Target collection.
        payload: Field map; values may be Ref instances.
        record_id: Target id for update/delete; may be a Ref.
    """

    index: int
    type: BatchOperationType
    sheet: str
    payload: dict[str, Any] = field(default_factory=dict)
    record_id: str | Ref | None = None

    @classmethod
    def from_wire(cls, index: int, raw: Any) -> BatchOperation:
        """Build an operation from its wire form.

        Args:
            index: Position of the operation in the batch.
            raw: Decoded operation object.

        Returns:
            The operation with placeholders replaced by Ref values.

        Raises:
            MalformedPayloadError: If the operation is malformed or a
                reference does not point to an earlier operation.
        """
        if not isinstance(raw, Mapping):
            raise MalformedPayloadError(f"Operation {index} must be an object")

        kind = str(raw.get("type") or raw.get("action") or "").strip().lower()
        try:
            op_type = BatchOperationType(kind)
        except ValueError as exc:
            raise MalformedPayloadError(
                f"Operation {index} has invalid type: {kind or '<missing>'}"
            ) from exc

        sheet = str(raw.get("sheet") or "").strip()
        if not sheet:
            raise MalformedPayloadError(f"Operation {index} is missing sheet")

        data = raw.get("data")
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise MalformedPayloadError(f"Operation {index} data must be an object")

        payload = {str(k): _parse_value(v, index) for k, v in data.items()}
        record_id = raw.get("id")
        if record_id is None or record_id == "":
            record_id = payload.get("id") if op_type is not BatchOperationType.CREATE else None
        if record_id is not None and not isinstance(record_id, Ref):
            record_id = _parse_value(record_id, index)
            if not isinstance(record_id, Ref):
                record_id = as_text(record_id)

        return cls(
            index=index,
            type=op_type,
            sheet=sheet,
            payload=payload,
            record_id=record_id,
        )

    def references(self) -> list[Ref]:
        """All references held by this operation."""
        refs = [v for v in self.payload.values() if isinstance(v, Ref)]
        if isinstance(self.record_id, Ref):
            refs.append(self.record_id)
        return refs

    def resolve(self, values: list[dict[str, Any]]) -> tuple[dict[str, Any], str | None]:
        """Substitute references with values from earlier steps.

        Args:
            values: Field values produced by operations ``0 .. index-1``, in
                order (see ``BatchResult.values``).

        Returns:
            Tuple of (concrete payload, concrete record id).

        Raises:
            UnresolvedReferenceError: If a referenced field is missing.
        """

        def lookup(ref: Ref) -> Any:
            produced = values[ref.operation_index]
            if ref.field not in produced:
                raise UnresolvedReferenceError(
                    f"result of operation {ref.operation_index} has no field '{ref.field}'"
                )
            return produced[ref.field]

        payload = {
            k: lookup(v) if isinstance(v, Ref) else v for k, v in self.payload.items()
        }
        record_id = self.record_id
        if isinstance(record_id, Ref):
            record_id = as_text(lookup(record_id))
        return payload, record_id


def build_batch(payload: Any, max_operations: int | None = None) -> list[BatchOperation]:
    """Build and validate a batch from its decoded wire payload.

    Args:
        payload: Decoded ``data`` parameter, expected ``{"operations": [...]}``.
        max_operations: Optional upper bound on the batch size.

    Returns:
        Ordered operations.

    Raises:
        MalformedPayloadError: If the batch or any operation is malformed.
    """
    if not isinstance(payload, Mapping):
        raise MalformedPayloadError("Missing operations[]")
    operations = payload.get("operations")
    if not isinstance(operations, list):
        raise MalformedPayloadError("Missing operations[]")
    if max_operations is not None and len(operations) > max_operations:
        raise MalformedPayloadError(
            f"Batch has {len(operations)} operations; limit is {max_operations}"
        )
    return [BatchOperation.from_wire(i, op) for i, op in enumerate(operations)]


@dataclass
class BatchResult:
    """Outcome of a batch run.

    A create step's outcome is the stored record plus ``index``, ``status``
    and ``sheet``; on the wire those three keys win over record columns of
    the same name. References never see that merge: they resolve against
    ``values``, which holds the stored fields only.

    Attributes:
        results: Per-operation outcomes of the steps that completed.
        values: Field values each completed step produced (the stored record
            for a create, ``{"id": ...}`` for an update or delete).
        failed_index: Index of the failing step, if any.
        error: Failure reason, if any.
    """

    results: list[dict[str, Any]] = field(default_factory=list)
    values: list[dict[str, Any]] = field(default_factory=list)
    failed_index: int | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """True when every step completed."""
        return self.failed_index is None

    @property
    def status(self) -> str:
        return "completed" if self.succeeded else "failed"

    def add(self, outcome: dict[str, Any], values: dict[str, Any]) -> None:
        """Record a completed step."""
        self.results.append(outcome)
        self.values.append(values)

    def to_body(self) -> dict[str, Any]:
        """Render the response body."""
        body: dict[str, Any] = {"results": self.results, "status": self.status}
        if not self.succeeded:
            body["failedIndex"] = self.failed_index
            body["error"] = self.error
        return body
