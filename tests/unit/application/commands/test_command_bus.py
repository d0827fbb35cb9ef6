"""Tests for CommandBus dispatch, middleware ordering and try_dispatch."""

from typing import Any

import pytest

from chronicle.application import Application
from chronicle.application.aggregates import AggregateFactory, AggregateRepository
from chronicle.application.commands import (
    AggregateToRepositoryMap,
    CommandBus,
    CommandResult,
    CommandToAggregateMap,
    DelegateToAggregate,
)
from chronicle.application.events import EventStore
from chronicle.application.middleware import Handler, Middleware
from chronicle.customers import CreateCustomer, Customer, DeactivateCustomer, UpdateCustomer
from chronicle.domain import (
    Command,
    DomainRuleViolation,
    ErrorKind,
    StoreUnavailable,
    UnsupportedCommand,
)
from chronicle.routing import intercepts


class Unknown(Command[None]):
    pass


class RecordingMiddleware(Middleware):
    def __init__(self, name: str, calls: list[str]):
        self.name = name
        self.calls = calls

    @intercepts
    async def record(self, command: Command, next: Handler) -> Any:
        self.calls.append(f"{self.name}:before")
        result = await next(command)
        self.calls.append(f"{self.name}:after")
        return result


class UpdateOnlyMiddleware(Middleware):
    def __init__(self, calls: list[str]):
        self.calls = calls

    @intercepts
    async def record(self, command: UpdateCustomer, next: Handler) -> Any:
        self.calls.append("update")
        return await next(command)


class FailingStore(EventStore):
    async def load_history(self, aggregate_id):
        return []

    async def append(self, event):
        raise StoreUnavailable("database down")


def make_bus(event_store: EventStore, middleware: list[Middleware] | None = None) -> CommandBus:
    repository = AggregateRepository(AggregateFactory(Customer), event_store)
    return CommandBus(
        DelegateToAggregate(
            CommandToAggregateMap.from_aggregates([Customer]),
            AggregateToRepositoryMap.from_repositories([repository]),
        ),
        middleware or [],
    )


def test_command_map_lists_every_customer_command():
    map = CommandToAggregateMap.from_aggregates([Customer])

    assert set(map.command_to_aggregate_map) == Customer.handled_command_types()
    assert map.get(CreateCustomer) is Customer


def test_command_map_rejects_unknown_type():
    map = CommandToAggregateMap.from_aggregates([Customer])

    with pytest.raises(UnsupportedCommand):
        map.get(Unknown)


@pytest.mark.asyncio
async def test_dispatch_delivers_to_aggregate(event_store: EventStore):
    bus = make_bus(event_store)

    await bus.dispatch(CreateCustomer(aggregate_id="c-1", name="Ann"))

    assert len(await event_store.load_history("c-1")) == 1


@pytest.mark.asyncio
async def test_dispatch_of_unknown_command_raises(event_store: EventStore):
    bus = make_bus(event_store)

    with pytest.raises(UnsupportedCommand):
        await bus.dispatch(Unknown(aggregate_id="c-1"))


@pytest.mark.asyncio
async def test_middleware_runs_in_registration_order(event_store: EventStore):
    calls: list[str] = []
    bus = make_bus(
        event_store,
        [RecordingMiddleware("outer", calls), RecordingMiddleware("inner", calls)],
    )

    await bus.dispatch(CreateCustomer(aggregate_id="c-1", name="Ann"))

    assert calls == ["outer:before", "inner:before", "inner:after", "outer:after"]


@pytest.mark.asyncio
async def test_targeted_middleware_only_sees_its_command(event_store: EventStore):
    calls: list[str] = []
    bus = make_bus(event_store, [UpdateOnlyMiddleware(calls)])

    await bus.dispatch(CreateCustomer(aggregate_id="c-1", name="Ann"))
    assert calls == []

    await bus.dispatch(UpdateCustomer(aggregate_id="c-1", name="Bea"))
    assert calls == ["update"]


@pytest.mark.asyncio
async def test_try_dispatch_success(event_store: EventStore):
    bus = make_bus(event_store)

    result = await bus.try_dispatch(CreateCustomer(aggregate_id="c-1", name="Ann"))

    assert result == CommandResult(ok=True)


@pytest.mark.asyncio
async def test_try_dispatch_reports_rule_violation(event_store: EventStore):
    bus = make_bus(event_store)

    result = await bus.try_dispatch(DeactivateCustomer(aggregate_id="c-1"))

    assert not result.ok
    assert result.error_kind is ErrorKind.DOMAIN_RULE_VIOLATION
    assert result.message == "can not deactivate non-existent customer"


@pytest.mark.asyncio
async def test_try_dispatch_reports_unsupported_command(event_store: EventStore):
    bus = make_bus(event_store)

    result = await bus.try_dispatch(Unknown(aggregate_id="c-1"))

    assert result.error_kind is ErrorKind.UNSUPPORTED_COMMAND


@pytest.mark.asyncio
async def test_try_dispatch_reports_store_failure(event_bus):
    bus = make_bus(FailingStore(None, event_bus))

    result = await bus.try_dispatch(CreateCustomer(aggregate_id="c-1", name="Ann"))

    assert result.error_kind is ErrorKind.STORE_UNAVAILABLE
    assert result.message == "database down"


@pytest.mark.asyncio
async def test_try_dispatch_does_not_hide_other_errors(event_store: EventStore):
    class Broken(Middleware):
        @intercepts
        async def fail(self, command: Command, next: Handler) -> Any:
            raise RuntimeError("bug")

    bus = make_bus(event_store, [Broken()])

    with pytest.raises(RuntimeError, match="bug"):
        await bus.try_dispatch(CreateCustomer(aggregate_id="c-1", name="Ann"))


@pytest.mark.asyncio
async def test_application_dispatch_raises_domain_error(customer_app: Application):
    async with customer_app:
        with pytest.raises(DomainRuleViolation, match="can not update non-existent customer"):
            await customer_app.dispatch(UpdateCustomer(aggregate_id="c-1", name="Ann"))
