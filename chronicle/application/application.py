import logging
from types import TracebackType
from typing import Any, Protocol, TypeVar, runtime_checkable

from ..domain import Aggregate, Command, Query
from .aggregates import AggregateFactory, AggregateRepository
from .commands import (
    AggregateToRepositoryMap,
    CommandBus,
    CommandResult,
    CommandToAggregateMap,
    DelegateToAggregate,
)
from .events import EventBus, EventStorageBackend, EventStore, InMemoryEventStorageBackend
from .middleware import Middleware
from .projections import (
    InMemoryReadModelStore,
    Projection,
    QueryBus,
    QueryToProjectionMap,
    ReadModelStore,
)

T = TypeVar("T")
P = TypeVar("P", bound=Projection)

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class HasLifecycle(Protocol):
    async def on_startup(self) -> None:
        """Called when the application is started."""
        ...

    async def on_shutdown(self) -> None:
        """Called when the application is shutdown."""
        ...


class Application:
    """A wired event-sourced application.

    Built by ApplicationBuilder. Holds one EventBus, one EventStore, a
    repository per aggregate type and the registered projections.
    """

    def __init__(
        self,
        event_bus: EventBus,
        event_store: EventStore,
        repositories: list[AggregateRepository[Any]],
        command_bus: CommandBus,
        projections: list[Projection],
        lifecycle: list[HasLifecycle],
    ):
        self.event_bus = event_bus
        self.event_store = event_store
        self.repositories = {repository.aggregate_type: repository for repository in repositories}
        self.command_bus = command_bus
        self.projections = projections
        self.query_bus = QueryBus(QueryToProjectionMap.from_projections(projections))
        self.lifecycle = lifecycle

    def repository(self, aggregate_type: type[Aggregate]) -> AggregateRepository[Any]:
        return self.repositories[aggregate_type]

    def projection(self, projection_type: type[P]) -> P:
        for projection in self.projections:
            if isinstance(projection, projection_type):
                return projection
        raise KeyError(projection_type.__name__)

    async def dispatch(self, command: Command[T]) -> T:
        """Dispatch a command through the middleware chain to its aggregate.

        Returns once the resulting events are stored and every projection
        has folded them.
        """
        return await self.command_bus.dispatch(command)

    async def try_dispatch(self, command: Command[T]) -> CommandResult[T]:
        return await self.command_bus.try_dispatch(command)

    async def query(self, query: Query[T]) -> T:
        return await self.query_bus.dispatch(query)

    async def startup(self) -> None:
        """Start lifecycle dependencies in registration order, then projections.

        Each projection subscribes to the bus and catches up on history.
        """
        for dependency in self.lifecycle:
            await dependency.on_startup()
        for projection in self.projections:
            await projection.start()
        LOGGER.info(
            "Application started",
            extra={
                "aggregates": [t.__name__ for t in self.repositories],
                "projections": [p.name for p in self.projections],
            },
        )

    async def shutdown(self) -> None:
        for projection in reversed(self.projections):
            await projection.stop()
        for dependency in reversed(self.lifecycle):
            await dependency.on_shutdown()

    async def __aenter__(self) -> "Application":
        await self.startup()
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_value: BaseException | None,
        _traceback: TracebackType | None,
    ) -> None:
        await self.shutdown()


class ApplicationBuilder:
    """Fluent builder wiring buses, store, repositories and projections.

    Defaults to in-memory event storage and read model storage.

    Example:
        >>> app = (
        ...     ApplicationBuilder()
        ...     .register_aggregate(Customer)
        ...     .register_projection(CustomerListProjection)
        ...     .register_middleware(ContextPropagationMiddleware())
        ...     .register_middleware(LoggingMiddleware("INFO"))
        ...     .build()
        ... )
        >>> async with app:
        ...     await app.dispatch(CreateCustomer(aggregate_id="1234", name="Ada"))
    """

    def __init__(self) -> None:
        self.aggregates: list[type[Aggregate]] = []
        self.projection_types: list[type[Projection]] = []
        self.middleware: list[Middleware] = []
        self.lifecycle: list[HasLifecycle] = []
        self.event_storage: EventStorageBackend | None = None
        self.read_model_store: ReadModelStore | None = None

    def register_aggregate(self, aggregate_type: type[Aggregate]) -> "ApplicationBuilder":
        self.aggregates.append(aggregate_type)
        return self

    def register_projection(self, projection_type: type[Projection]) -> "ApplicationBuilder":
        self.projection_types.append(projection_type)
        return self

    def register_middleware(self, middleware: Middleware) -> "ApplicationBuilder":
        self.middleware.append(middleware)
        return self

    def register_lifecycle(self, dependency: HasLifecycle) -> "ApplicationBuilder":
        self.lifecycle.append(dependency)
        return self

    def use_event_storage(self, backend: EventStorageBackend) -> "ApplicationBuilder":
        self.event_storage = backend
        if isinstance(backend, HasLifecycle):
            self.register_lifecycle(backend)
        return self

    def use_read_model_store(self, adapter: ReadModelStore) -> "ApplicationBuilder":
        self.read_model_store = adapter
        if isinstance(adapter, HasLifecycle):
            self.register_lifecycle(adapter)
        return self

    def build(self) -> Application:
        event_bus = EventBus()
        event_store = EventStore(self.event_storage or InMemoryEventStorageBackend(), event_bus)
        read_model_store = self.read_model_store or InMemoryReadModelStore()

        repositories: list[AggregateRepository[Any]] = [
            AggregateRepository(AggregateFactory(aggregate_type), event_store)
            for aggregate_type in self.aggregates
        ]
        command_bus = CommandBus(
            DelegateToAggregate(
                CommandToAggregateMap.from_aggregates(self.aggregates),
                AggregateToRepositoryMap.from_repositories(repositories),
            ),
            list(self.middleware),
        )
        projections = [
            projection_type(event_bus, event_store, read_model_store)
            for projection_type in self.projection_types
        ]
        return Application(
            event_bus=event_bus,
            event_store=event_store,
            repositories=repositories,
            command_bus=command_bus,
            projections=projections,
            lifecycle=list(self.lifecycle),
        )
