"""Domain entities for the gateway.

Exports:
    Datasets:
        - CollectionHandle: Opaque handle to a stored collection
        - Dataset: Header row plus positional data rows

    Batches:
        - BatchOperation: One step of a batch, with typed references
        - BatchOperationType: create / update / delete
        - BatchResult: Ordered outcomes plus the failing index, if any
        - UnresolvedReferenceError: Referenced result field is missing
        - build_batch: Build and validate a batch from its wire form
"""

from sheet_gateway.domain.entities.batch import (
    BatchOperation,
    BatchOperationType,
    BatchResult,
    UnresolvedReferenceError,
    build_batch,
)
from sheet_gateway.domain.entities.dataset import CollectionHandle, Dataset

__all__ = [
    "CollectionHandle",
    "Dataset",
    "BatchOperation",
    "BatchOperationType",
    "BatchResult",
    "UnresolvedReferenceError",
    "build_batch",
]
