"""Projection base class: event-folded read models with query support."""

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any, ClassVar, TypeVar

from ...domain import Event, ProjectionInvariantViolation, Query
from ...routing import MessageRouter, RouteKind
from ..events import EventBus, EventProcessor, EventStore
from .store import ReadModelStore

T = TypeVar("T")

LOGGER = logging.getLogger(__name__)


class Projection(EventProcessor):
    """Base class for read models that fold events and serve queries.

    A projection keeps a denormalized view of the event log in a
    ReadModelStore. It receives new events live from the EventBus and
    catches up on older ones from the EventStore.

    **Startup protocol** (``start``):

    1. Subscribe ``handle_event`` to the bus, so nothing appended from now
       on is missed.
    2. ``rebuild``: replay ``store.all_events(after=checkpoint)``.

    Subscribing first means an event can reach the projection twice, once
    through replay and once live. Every applied event advances a checkpoint
    (the last global sequence folded), persisted in the ``checkpoints``
    collection of the same adapter, and events at or below it are skipped.
    Re-delivery is therefore a no-op, and a restarted projection only
    replays what it has not seen. Live events wait while a rebuild is
    running.

    A fresh adapter has no checkpoint, so pointing a projection at an empty
    adapter rebuilds it from the whole history.

    **Event Handling:** mark methods with @handles_event. Events with no
    handler only advance the checkpoint. Handler errors are not caught:
    they abort the publish and reach the command that caused the event.
    Events are folded strictly in sequence order, so after a failure every
    later live event is refused with ProjectionInvariantViolation until a
    rebuild has retried the failed one. Events that were never appended
    (sequence 0) are rejected with ValueError.

    **Query Handling:** mark methods with @handles_query.

    Example:
        >>> projection = CustomerListProjection(bus, store, InMemoryReadModelStore())
        >>> await projection.start()
        >>> await projection.query(ListCustomers(active_only=True))
    """

    checkpoint_collection: ClassVar[str] = "checkpoints"

    _event_router: ClassVar[MessageRouter]
    _query_router: ClassVar[MessageRouter]

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        cls._query_router = MessageRouter.for_class(cls, RouteKind.QUERY, strict=True)

    @classmethod
    def handled_query_types(cls) -> set[type]:
        return cls._query_router.registered_types()

    def __init__(self, bus: EventBus, store: EventStore, adapter: ReadModelStore):
        self.bus = bus
        self.store = store
        self.adapter = adapter
        self.position = 0
        self._checkpoint_saved = False
        self._lock = asyncio.Lock()
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def started(self) -> bool:
        return self._unsubscribe is not None

    async def start(self) -> None:
        """Subscribe to live events, then catch up on history."""
        if self.started:
            return
        self._unsubscribe = self.bus.subscribe(self.handle_event)
        await self.rebuild()

    async def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def rebuild(self) -> int:
        """Replay every stored event past the persisted checkpoint.

        Returns:
            The number of events folded during this rebuild.
        """
        async with self._lock:
            await self._load_checkpoint()
            start = self.position
            replayed = 0
            async for event in self.store.all_events(after=start):
                if await self._fold(event):
                    replayed += 1

        LOGGER.info(
            "Projection rebuilt",
            extra={
                "projection": self.name,
                "from_sequence": start,
                "to_sequence": self.position,
                "replayed": replayed,
            },
        )
        return replayed

    async def handle_event(self, event: Event[Any]) -> None:
        """Bus subscriber: fold one live event unless already applied.

        Raises:
            ValueError: If the event was never appended.
            ProjectionInvariantViolation: If earlier events have not been
                folded yet, e.g. after a handler failure.
        """
        async with self._lock:
            await self._fold(event)

    async def query(self, query: Query[T]) -> T:
        """Route a query to its registered handler method.

        Raises:
            NotImplementedError: If no handler is registered for the query.
        """
        result = self._query_router.route(self, query)
        if inspect.iscoroutine(result):
            result = await result
        return result  # type: ignore[return-value]

    async def _fold(self, event: Event[Any]) -> bool:
        if not event.is_committed:
            raise ValueError(
                f"{self.name} can only fold stored events, {event.id} has no sequence"
            )
        if event.sequence <= self.position:
            return False
        if event.sequence != self.position + 1:
            raise ProjectionInvariantViolation(
                f"{self.name} is at sequence {self.position} and cannot fold {event.sequence} "
                "before the events in between; rebuild it"
            )
        await self.handle(event)
        self.position = event.sequence
        await self._save_checkpoint()
        return True

    async def _load_checkpoint(self) -> None:
        checkpoint = await self.adapter.get(self.checkpoint_collection, self.name)
        if checkpoint is None:
            return
        self._checkpoint_saved = True
        self.position = max(self.position, checkpoint["sequence"])

    async def _save_checkpoint(self) -> None:
        record = {"sequence": self.position}
        if self._checkpoint_saved:
            await self.adapter.update(self.checkpoint_collection, self.name, record)
        else:
            await self.adapter.insert(self.checkpoint_collection, self.name, record)
            self._checkpoint_saved = True
