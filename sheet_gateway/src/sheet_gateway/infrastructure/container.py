"""Dependency injection container and gateway wiring."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from sheet_gateway.adapters.outbound.file_row_store import FileRowStore
from sheet_gateway.adapters.outbound.memory_row_store import InMemoryRowStore
from sheet_gateway.application.batch_runner import BatchRunner
from sheet_gateway.application.change_tracker import ChangeTracker
from sheet_gateway.application.clock import Clock, system_clock
from sheet_gateway.application.dispatcher import GatewayDispatcher
from sheet_gateway.application.record_writer import RecordWriter
from sheet_gateway.application.settings import SettingsService
from sheet_gateway.application.sync import SyncService
from sheet_gateway.domain.services.collection_store import CollectionStore
from sheet_gateway.domain.services.enrichment import EnrichmentEngine
from sheet_gateway.domain.services.schema_registry import SchemaRegistry
from sheet_gateway.infrastructure.config import Config, get_config
from sheet_gateway.infrastructure.metrics import MetricsRegistry
from sheet_gateway.ports.outbound.row_store import RowStore

T = TypeVar("T")


class Container:
    """
    Simple dependency injection container.

    Supports singleton and factory registrations with lazy initialization.
    """

    def __init__(self) -> None:
        """Initialize the container."""
        self._singletons: dict[type, Any] = {}
        self._factories: dict[type, Callable[[Container], Any]] = {}
        self._instances: dict[type, Any] = {}

    def register_singleton(self, interface: type[T], instance: T) -> None:
        """
        Register a ready-made instance.

        Args:
            interface: The interface/type to register
            instance: The singleton instance
        """
        self._singletons[interface] = instance
        self._instances[interface] = instance

    def register_factory(
        self,
        interface: type[T],
        factory: Callable[[Container], T],
    ) -> None:
        """
        Register a factory called on first resolve.

        Args:
            interface: The interface/type to register
            factory: Factory function that takes the container and returns an instance
        """
        self._factories[interface] = factory

    def resolve(self, interface: type[T]) -> T:
        """
        Resolve a dependency, building it on first use.

        Raises:
            KeyError: If no registration exists for the interface
        """
        if interface in self._instances:
            return self._instances[interface]

        if interface in self._factories:
            instance = self._factories[interface](self)
            self._instances[interface] = instance
            return instance

        raise KeyError(f"No registration found for {interface}")

    def has(self, interface: type) -> bool:
        """Check if an interface is registered."""
        return interface in self._singletons or interface in self._factories

    def clear(self) -> None:
        """Clear all registrations and instances."""
        self._singletons.clear()
        self._factories.clear()
        self._instances.clear()


def create_row_store(config: Config) -> RowStore:
    """Row store backend selected by ``store.backend``."""
    if config.store.backend == "memory":
        return InMemoryRowStore()
    config.ensure_directories()
    return FileRowStore(config.store.data_dir)


def build_container(
    config: Config | None = None,
    metrics: MetricsRegistry | None = None,
    row_store: RowStore | None = None,
    clock: Clock = system_clock,
) -> Container:
    """
    Register every gateway component.

    Args:
        config: Configuration; defaults to ``get_config()``
        metrics: Optional metrics registry shared by all components
        row_store: Backend override (tests pass an in-memory store)
        clock: Time source for timestamps

    Returns:
        A container from which GatewayDispatcher can be resolved
    """
    config = config or get_config()
    container = Container()
    container.register_singleton(Config, config)

    if row_store is not None:
        container.register_singleton(RowStore, row_store)
    else:
        container.register_factory(RowStore, lambda c: create_row_store(c.resolve(Config)))

    container.register_factory(SchemaRegistry, lambda c: SchemaRegistry())
    container.register_factory(
        CollectionStore,
        lambda c: CollectionStore(c.resolve(RowStore), c.resolve(SchemaRegistry), metrics),
    )
    container.register_factory(
        ChangeTracker,
        lambda c: ChangeTracker(
            c.resolve(CollectionStore), clock, enabled=config.gateway.track_changes
        ),
    )
    container.register_factory(
        RecordWriter,
        lambda c: RecordWriter(
            c.resolve(CollectionStore),
            c.resolve(ChangeTracker),
            clock,
            duplicate_ids=config.gateway.duplicate_ids,
        ),
    )
    container.register_factory(
        EnrichmentEngine, lambda c: EnrichmentEngine(c.resolve(CollectionStore))
    )
    container.register_factory(
        BatchRunner, lambda c: BatchRunner(c.resolve(RecordWriter), metrics)
    )
    container.register_factory(
        SyncService,
        lambda c: SyncService(c.resolve(CollectionStore), c.resolve(ChangeTracker), clock),
    )
    container.register_factory(
        SettingsService,
        lambda c: SettingsService(c.resolve(CollectionStore), c.resolve(ChangeTracker), clock),
    )
    container.register_factory(
        GatewayDispatcher,
        lambda c: GatewayDispatcher(
            store=c.resolve(CollectionStore),
            writer=c.resolve(RecordWriter),
            enrichment=c.resolve(EnrichmentEngine),
            batch_runner=c.resolve(BatchRunner),
            sync=c.resolve(SyncService),
            settings=c.resolve(SettingsService),
            shared_secret=config.gateway.shared_secret,
            max_batch_operations=config.gateway.max_batch_operations,
            metrics=metrics,
        ),
    )
    return container


def build_dispatcher(
    config: Config | None = None,
    metrics: MetricsRegistry | None = None,
    row_store: RowStore | None = None,
    clock: Clock = system_clock,
) -> GatewayDispatcher:
    """Shortcut for ``build_container(...).resolve(GatewayDispatcher)``."""
    return build_container(config, metrics, row_store, clock).resolve(GatewayDispatcher)
