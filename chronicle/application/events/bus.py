"""In-process synchronous publish/subscribe for stored events."""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ...domain import Event

LOGGER = logging.getLogger(__name__)

EventHandler = Callable[[Event[Any]], Awaitable[object] | object]


class EventBus:
    """Fans each stored event out to every subscriber, in order.

    The bus is the live half of the read side. It has no buffer, does not
    persist anything and never replays the past; projections catch up on
    history from EventStore.all_events() themselves.

    Delivery is synchronous from the publisher's point of view: publish()
    awaits each subscriber in registration order and only returns once all
    of them have. A failing subscriber aborts delivery and the exception
    reaches the publisher (the event store's append), so a broken read
    model cannot silently drift from the log.

    Handlers may be plain functions or coroutine functions.

    Example:
        >>> bus = EventBus()
        >>> seen = []
        >>> unsubscribe = bus.subscribe(seen.append)
        >>> await bus.publish(event)
        >>> seen == [event]
        True
    """

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """Register a handler for every event published from now on.

        Args:
            handler: Called with each Event. May return an awaitable.

        Returns:
            A callable that removes this subscription.
        """
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    async def publish(self, event: Event[Any]) -> None:
        """Deliver one event to all subscribers in subscription order.

        Raises:
            Exception: Whatever a subscriber raised; later subscribers are
                not called.
        """
        LOGGER.debug(
            "Publishing event",
            extra={
                "event_name": event.name,
                "aggregate_id": event.aggregate_id,
                "sequence": event.sequence,
                "subscribers": len(self._handlers),
            },
        )
        # Copy so a handler that unsubscribes does not skip its neighbour
        for handler in list(self._handlers):
            result = handler(event)
            if inspect.isawaitable(result):
                await result
