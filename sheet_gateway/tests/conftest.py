"""Pytest configuration and fixtures for sheet_gateway tests."""

from __future__ import annotations

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from sheet_gateway.adapters.outbound.memory_row_store import InMemoryRowStore
from sheet_gateway.application.dispatcher import GatewayDispatcher
from sheet_gateway.domain.services.collection_store import CollectionStore
from sheet_gateway.infrastructure.config import Config, GatewayConfig, StoreConfig
from sheet_gateway.infrastructure.container import build_dispatcher
from sheet_gateway.infrastructure.metrics import MetricsRegistry

START = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


class SteppingClock:
    """Clock that moves forward one second every time it is read."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(seconds=1)) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        moment = self.now
        self.now = self.now + self.step
        return moment


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration with the in-memory backend."""
    return Config(
        store=StoreConfig(backend="memory", data_dir=temp_dir / "data"),
        gateway=GatewayConfig(max_batch_operations=50),
    )


@pytest.fixture
def clock() -> SteppingClock:
    """Provide a deterministic, strictly increasing clock."""
    return SteppingClock()


@pytest.fixture
def row_store() -> InMemoryRowStore:
    """Provide an empty in-memory row store."""
    return InMemoryRowStore()


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def collection_store(
    row_store: InMemoryRowStore, metrics_registry: MetricsRegistry
) -> CollectionStore:
    """Provide a collection store over the in-memory row store."""
    return CollectionStore(row_store, metrics=metrics_registry)


@pytest.fixture
def dispatcher(
    test_config: Config,
    metrics_registry: MetricsRegistry,
    row_store: InMemoryRowStore,
    clock: SteppingClock,
) -> GatewayDispatcher:
    """Provide a fully wired dispatcher over the in-memory row store."""
    return build_dispatcher(test_config, metrics_registry, row_store, clock)


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
