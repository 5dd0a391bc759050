"""Application layer - orchestrates domain services for gateway actions.

Exports:
    GatewayDispatcher: Single entry point routing actions to handlers
    RecordWriter: Create/update/delete primitives
    BatchRunner: Sequential batch execution with back-references
    ChangeTracker: Per-collection change times
    SyncService: Full and delta sync snapshots
    SettingsService: Key/value settings
"""

from sheet_gateway.application.batch_runner import BatchRunner
from sheet_gateway.application.change_tracker import ChangeTracker
from sheet_gateway.application.clock import (
    Clock,
    iso_timestamp,
    parse_timestamp,
    system_clock,
)
from sheet_gateway.application.dispatcher import GatewayDispatcher
from sheet_gateway.application.record_writer import RecordWriter, next_id
from sheet_gateway.application.settings import SettingsService
from sheet_gateway.application.sync import SyncService

__all__ = [
    "BatchRunner",
    "ChangeTracker",
    "Clock",
    "GatewayDispatcher",
    "RecordWriter",
    "SettingsService",
    "SyncService",
    "iso_timestamp",
    "next_id",
    "parse_timestamp",
    "system_clock",
]
