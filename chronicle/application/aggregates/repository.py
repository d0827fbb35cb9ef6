import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ..events import EventStore

if TYPE_CHECKING:
    from ...domain import Aggregate, Command

A = TypeVar("A", bound="Aggregate")

LOGGER = logging.getLogger(__name__)


class AggregateFactory(Generic[A]):
    """Factory for creating aggregate instances of a specific type."""

    def __init__(self, aggregate_type: type[A]):
        self._aggregate_type = aggregate_type

    def get_type(self) -> type[A]:
        return self._aggregate_type

    def create(self, aggregate_id: str) -> A:
        """Create an aggregate in its initial, nonexistent state."""
        return self._aggregate_type(id=aggregate_id)


class AggregateRepository(Generic[A]):
    """Loads aggregates from their history and commits what they emit.

    Aggregates are never stored as such. ``load`` rebuilds one by folding
    its events from the store onto a fresh instance, and ``acquire`` wraps
    a unit of work: the folded aggregate is yielded, and whatever it emitted
    is appended to the store, one event at a time, in emission order, when
    the block exits cleanly. If the block raises, the uncommitted events are
    dropped and nothing is appended.

    Command validation therefore only ever sees the folded write-side state,
    never a read model.
    """

    __slots__ = ("aggregate_factory", "aggregate_type", "event_store")

    def __init__(self, aggregate_factory: AggregateFactory[A], event_store: EventStore):
        self.aggregate_factory = aggregate_factory
        self.aggregate_type = aggregate_factory.get_type()
        self.event_store = event_store

    async def load(self, aggregate_id: str) -> A:
        """Fold the stored history of an aggregate into its current state.

        An aggregate without history comes back in its initial state.
        """
        aggregate = self.aggregate_factory.create(aggregate_id)
        history = await self.event_store.load_history(aggregate_id)
        aggregate.replay_events(history)
        return aggregate

    @asynccontextmanager
    async def acquire(self, aggregate_id: str) -> AsyncIterator[A]:
        aggregate = await self.load(aggregate_id)
        original_version = aggregate.version

        try:
            yield aggregate
        except Exception:
            aggregate.clear_uncommitted_events()
            raise

        if aggregate.changed_since(original_version):
            await self._save_aggregate(aggregate)

    async def apply(self, aggregate_id: str, command: "Command[Any]") -> Any:
        """Handle a command against the current state of an aggregate.

        Args:
            aggregate_id: The aggregate the command targets.
            command: The command to validate and execute.

        Returns:
            Whatever the aggregate's command handler returned.

        Raises:
            DomainRuleViolation: If the command breaks an aggregate rule.
                No events are appended.
            StoreUnavailable: If the event store could not persist an event.
        """
        async with self.acquire(aggregate_id) as aggregate:
            return aggregate.handle(command)

    async def _save_aggregate(self, aggregate: A) -> None:
        uncommitted_events = list(aggregate.get_uncommitted_events())
        aggregate.clear_uncommitted_events()
        for event in uncommitted_events:
            await self.event_store.append(event)
        LOGGER.debug(
            "Committed aggregate changes",
            extra={
                "aggregate_type": self.aggregate_type.__name__,
                "aggregate_id": aggregate.id,
                "event_count": len(uncommitted_events),
            },
        )
