"""Append-only event store and its storage backends."""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import AsyncIterator
from typing import Any

from ...domain import Event, StoreUnavailable
from .bus import EventBus

LOGGER = logging.getLogger(__name__)


class EventStorageBackend(ABC):
    """Durable storage behind the EventStore.

    Backends only persist and retrieve. Sequence assignment and publishing
    belong to EventStore. A backend that cannot reach its storage must raise
    StoreUnavailable; the write is then considered not to have happened.
    """

    @abstractmethod
    async def last_sequence(self) -> int:
        """Return the highest sequence stored so far, or 0 when empty."""
        ...

    @abstractmethod
    async def write(self, event: Event[Any]) -> None:
        """Durably persist one already-sequenced event."""
        ...

    @abstractmethod
    async def read(self, aggregate_id: str) -> list[Event[Any]]:
        """Return every event of one aggregate, in sequence order."""
        ...

    @abstractmethod
    def read_all(self, after: int = 0) -> AsyncIterator[Event[Any]]:
        """Iterate over every event with sequence > ``after``, in order.

        Not a coroutine: the returned iterator should reflect the log as of
        the call.
        """
        ...


class InMemoryEventStorageBackend(EventStorageBackend):
    """List-backed storage for tests and single-process use.

    **NOT suitable for production**: nothing survives a restart.
    """

    def __init__(self) -> None:
        self.events_in_order: list[Event[Any]] = []
        self.by_aggregate_id: dict[str, list[Event[Any]]] = defaultdict(list)

    async def last_sequence(self) -> int:
        if not self.events_in_order:
            return 0
        return self.events_in_order[-1].sequence

    async def write(self, event: Event[Any]) -> None:
        self.events_in_order.append(event)
        self.by_aggregate_id[event.aggregate_id].append(event)

    async def read(self, aggregate_id: str) -> list[Event[Any]]:
        return list(self.by_aggregate_id.get(aggregate_id, []))

    def read_all(self, after: int = 0) -> AsyncIterator[Event[Any]]:
        snapshot = [e for e in self.events_in_order if e.sequence > after]
        return _iterate(snapshot)


async def _iterate(events: list[Event[Any]]) -> AsyncIterator[Event[Any]]:
    for event in events:
        yield event


class EventStore:
    """The single source of truth: an append-only, globally ordered log.

    append() is the only mutation. It assigns the next sequence number,
    persists the event through the backend and then publishes exactly that
    event on the bus, all before returning. Callers can therefore rely on
    every subscriber having observed the event once append() resolves.
    If persisting fails, nothing is published; if a subscriber fails, the
    event stays committed and the error propagates to the caller.

    No locking is done here. All appends are expected to come from a single
    writer; concurrent writers must serialise append-and-publish themselves
    to keep the ordering guarantee.

    Example:
        >>> store = EventStore(InMemoryEventStorageBackend(), EventBus())
        >>> stored = await store.append(event)
        >>> stored.sequence
        1
        >>> [e.sequence async for e in store.all_events()]
        [1]
    """

    def __init__(self, backend: EventStorageBackend, bus: EventBus):
        self.backend = backend
        self.bus = bus

    async def append(self, event: Event[Any]) -> Event[Any]:
        """Persist one event and publish it.

        Args:
            event: An event not yet in the store (sequence 0).

        Returns:
            The stored event carrying its assigned sequence.

        Raises:
            ValueError: If the event already carries a sequence.
            StoreUnavailable: If the backend could not persist the event.
        """
        if event.is_committed:
            raise ValueError(f"Event {event.id} was already appended at sequence {event.sequence}")

        try:
            sequence = await self.backend.last_sequence() + 1
            stored = event.model_copy(update={"sequence": sequence})
            await self.backend.write(stored)
        except OSError as err:
            raise StoreUnavailable(f"Event storage unreachable: {err}") from err

        LOGGER.debug(
            "Appended event",
            extra={
                "event_name": stored.name,
                "aggregate_id": stored.aggregate_id,
                "sequence": stored.sequence,
            },
        )
        await self.bus.publish(stored)
        return stored

    async def load_history(self, aggregate_id: str) -> list[Event[Any]]:
        """Events of one aggregate, oldest first. Empty for unknown ids."""
        return await self.backend.read(aggregate_id)

    def all_events(self, after: int = 0) -> AsyncIterator[Event[Any]]:
        """Lazily iterate the whole log in append order.

        Every call starts a fresh, finite iteration, so the history can be
        replayed as many times as needed.

        Args:
            after: Only yield events with a sequence greater than this.
        """
        return self.backend.read_all(after)
