"""Tests for Application wiring and lifecycle."""

import logging

import pytest

from chronicle.application import Application, ApplicationBuilder, HasLifecycle
from chronicle.application.events import InMemoryEventStorageBackend
from chronicle.customers import (
    CreateCustomer,
    Customer,
    CustomerCreated,
    CustomerListProjection,
    GetCustomer,
)
from chronicle.domain import Event


class LifecycleTracker:
    def __init__(self, name: str, calls: list[str]):
        self.name = name
        self.calls = calls

    async def on_startup(self) -> None:
        self.calls.append(f"{self.name}:start")

    async def on_shutdown(self) -> None:
        self.calls.append(f"{self.name}:stop")


class TrackedStorage(InMemoryEventStorageBackend):
    def __init__(self, calls: list[str]):
        super().__init__()
        self.calls = calls

    async def on_startup(self) -> None:
        self.calls.append("storage:start")

    async def on_shutdown(self) -> None:
        self.calls.append("storage:stop")


def test_build_defaults_to_in_memory_storage():
    app = ApplicationBuilder().register_aggregate(Customer).build()

    assert isinstance(app.event_store.backend, InMemoryEventStorageBackend)
    assert app.repository(Customer).aggregate_type is Customer
    assert app.projections == []


def test_projection_lookup(customer_app: Application):
    assert isinstance(customer_app.projection(CustomerListProjection), CustomerListProjection)


def test_missing_projection_lookup():
    app = ApplicationBuilder().build()

    with pytest.raises(KeyError):
        app.projection(CustomerListProjection)


def test_lifecycle_protocol_is_structural():
    assert isinstance(LifecycleTracker("x", []), HasLifecycle)
    assert not isinstance(InMemoryEventStorageBackend(), HasLifecycle)


@pytest.mark.asyncio
async def test_lifecycle_order():
    calls: list[str] = []
    app = (
        ApplicationBuilder()
        .register_lifecycle(LifecycleTracker("first", calls))
        .use_event_storage(TrackedStorage(calls))
        .register_lifecycle(LifecycleTracker("last", calls))
        .build()
    )

    async with app:
        calls.append("running")

    assert calls == [
        "first:start",
        "storage:start",
        "last:start",
        "running",
        "last:stop",
        "storage:stop",
        "first:stop",
    ]


@pytest.mark.asyncio
async def test_startup_rebuilds_projections_from_history(
    customer_app_builder: ApplicationBuilder, storage: InMemoryEventStorageBackend
):
    await storage.write(
        Event(aggregate_id="c-1", data=CustomerCreated(name="Ann"), sequence=1)
    )
    app = customer_app_builder.build()

    async with app:
        customer = await app.query(GetCustomer(customer_id="c-1"))

    assert customer.name == "Ann"


@pytest.mark.asyncio
async def test_shutdown_unsubscribes_projections(customer_app: Application):
    async with customer_app:
        assert customer_app.event_bus.subscriber_count == 1

    assert customer_app.event_bus.subscriber_count == 0


@pytest.mark.asyncio
async def test_startup_is_logged(customer_app: Application, caplog):
    with caplog.at_level(logging.INFO, logger="chronicle"):
        async with customer_app:
            pass

    started = [r for r in caplog.records if r.getMessage() == "Application started"]
    assert started[0].projections == ["CustomerListProjection"]


@pytest.mark.asyncio
async def test_dispatch_returns_after_projection_updated(customer_app: Application):
    async with customer_app:
        await customer_app.dispatch(CreateCustomer(aggregate_id="c-1", name="Ann"))

        customer = await customer_app.query(GetCustomer(customer_id="c-1"))

    assert customer.active == 1
