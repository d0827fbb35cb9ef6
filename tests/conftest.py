"""Central test fixtures."""

import pytest

from chronicle.application import Application, ApplicationBuilder
from chronicle.application.events import EventBus, EventStore, InMemoryEventStorageBackend
from chronicle.application.middleware import ContextPropagationMiddleware, LoggingMiddleware
from chronicle.application.projections import InMemoryReadModelStore
from chronicle.context import clear_context
from chronicle.customers import Customer, CustomerListProjection


@pytest.fixture(autouse=True)
def clear_execution_context():
    """Clear execution context before and after each test."""
    clear_context()
    yield
    clear_context()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def storage() -> InMemoryEventStorageBackend:
    return InMemoryEventStorageBackend()


@pytest.fixture
def event_store(storage: InMemoryEventStorageBackend, event_bus: EventBus) -> EventStore:
    return EventStore(storage, event_bus)


@pytest.fixture
def read_model_store() -> InMemoryReadModelStore:
    return InMemoryReadModelStore()


@pytest.fixture
def customer_app_builder(
    storage: InMemoryEventStorageBackend, read_model_store: InMemoryReadModelStore
) -> ApplicationBuilder:
    """Builder wired with the customer domain on shared in-memory storage."""
    return (
        ApplicationBuilder()
        .use_event_storage(storage)
        .use_read_model_store(read_model_store)
        .register_middleware(ContextPropagationMiddleware())
        .register_middleware(LoggingMiddleware("INFO"))
        .register_aggregate(Customer)
        .register_projection(CustomerListProjection)
    )


@pytest.fixture
def customer_app(customer_app_builder: ApplicationBuilder) -> Application:
    return customer_app_builder.build()
