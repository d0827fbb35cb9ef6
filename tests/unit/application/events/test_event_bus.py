"""Tests for the synchronous EventBus."""

import pytest

from chronicle.application.events import EventBus
from chronicle.domain import DomainEvent, Event


class Pinged(DomainEvent):
    pass


@pytest.fixture
def event() -> Event[Pinged]:
    return Event(aggregate_id="a-1", data=Pinged(), sequence=1)


@pytest.mark.asyncio
async def test_publish_without_subscribers(event_bus: EventBus, event: Event):
    await event_bus.publish(event)

    assert event_bus.subscriber_count == 0


@pytest.mark.asyncio
async def test_subscribers_called_in_registration_order(event_bus: EventBus, event: Event):
    calls: list[str] = []

    async def first(e: Event) -> None:
        calls.append("first")

    def second(e: Event) -> None:
        calls.append("second")

    event_bus.subscribe(first)
    event_bus.subscribe(second)
    await event_bus.publish(event)

    assert calls == ["first", "second"]


@pytest.mark.asyncio
async def test_each_subscriber_receives_event_once(event_bus: EventBus, event: Event):
    received: list[Event] = []
    event_bus.subscribe(received.append)

    await event_bus.publish(event)

    assert received == [event]


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery(event_bus: EventBus, event: Event):
    received: list[Event] = []
    unsubscribe = event_bus.subscribe(received.append)

    unsubscribe()
    unsubscribe()
    await event_bus.publish(event)

    assert received == []
    assert event_bus.subscriber_count == 0


@pytest.mark.asyncio
async def test_failing_subscriber_stops_delivery(event_bus: EventBus, event: Event):
    received: list[Event] = []

    def explode(e: Event) -> None:
        raise ValueError("boom")

    event_bus.subscribe(explode)
    event_bus.subscribe(received.append)

    with pytest.raises(ValueError, match="boom"):
        await event_bus.publish(event)

    assert received == []


@pytest.mark.asyncio
async def test_unsubscribing_during_publish_does_not_skip_others(
    event_bus: EventBus, event: Event
):
    received: list[str] = []
    unsubscribe_first = None

    def first(e: Event) -> None:
        received.append("first")
        unsubscribe_first()

    def second(e: Event) -> None:
        received.append("second")

    unsubscribe_first = event_bus.subscribe(first)
    event_bus.subscribe(second)
    await event_bus.publish(event)

    assert received == ["first", "second"]
    assert event_bus.subscriber_count == 1
