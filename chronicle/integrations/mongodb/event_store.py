"""MongoDB event storage backend."""

from collections.abc import AsyncIterator
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field
from ulid import ULID

from chronicle.application.events import EventStorageBackend
from chronicle.domain import Event
from chronicle.integrations.mongodb.collection import IndexedCollection, IndexSpec
from chronicle.integrations.mongodb.config import MongoConfiguration
from chronicle.integrations.mongodb.type_loader import get_qualified_name, load_type


class EventDocument(BaseModel):
    """Event representation for MongoDB storage."""

    event_id: str
    name: str
    aggregate_id: str
    sequence: int
    timestamp: datetime
    data_type: str = Field(description="Fully qualified type name of the payload")
    data: dict[str, Any]
    correlation_id: str | None = None
    causation_id: str | None = None

    @classmethod
    def from_value(cls, event: Event[Any]) -> "EventDocument":
        return cls(
            event_id=str(event.id),
            name=event.name,
            aggregate_id=event.aggregate_id,
            sequence=event.sequence,
            timestamp=event.timestamp,
            data_type=get_qualified_name(type(event.data)),
            data=event.data.model_dump(mode="json"),
            correlation_id=str(event.correlation_id) if event.correlation_id else None,
            causation_id=str(event.causation_id) if event.causation_id else None,
        )

    def to_value(self) -> Event[Any]:
        data_type = load_type(self.data_type)
        return Event(
            id=ULID.from_str(self.event_id),
            aggregate_id=self.aggregate_id,
            sequence=self.sequence,
            timestamp=self.timestamp,
            data=data_type.model_validate(self.data),
            correlation_id=ULID.from_str(self.correlation_id) if self.correlation_id else None,
            causation_id=ULID.from_str(self.causation_id) if self.causation_id else None,
        )


class MongoEventStorageBackend(EventStorageBackend):
    """Stores the event log in a single MongoDB collection.

    One document per event. A unique index on ``sequence`` rejects a second
    writer claiming the same position; ``(aggregate_id, sequence)`` serves
    history loads. Driver errors surface as StoreUnavailable.

    Example:
        >>> config = MongoConfiguration(uri="mongodb://localhost:27017")
        >>> store = EventStore(MongoEventStorageBackend(config), EventBus())
        >>> await store.append(event)
    """

    def __init__(self, config: MongoConfiguration) -> None:
        self._collection = IndexedCollection(
            config.events,
            indexes=[
                IndexSpec(names=("sequence",), unique=True),
                IndexSpec(names=("aggregate_id", "sequence")),
            ],
        )

    async def on_startup(self) -> None:
        await self._collection.ensure_indexes()

    async def on_shutdown(self) -> None:
        pass

    async def last_sequence(self) -> int:
        doc = await self._collection.last("sequence")
        return doc["sequence"] if doc else 0

    async def write(self, event: Event[Any]) -> None:
        await self._collection.insert_one(EventDocument.from_value(event).model_dump())

    async def read(self, aggregate_id: str) -> list[Event[Any]]:
        return [
            EventDocument.model_validate(doc).to_value()
            async for doc in self._collection.find({"aggregate_id": aggregate_id}, "sequence")
        ]

    async def read_all(self, after: int = 0) -> AsyncIterator[Event[Any]]:
        async for doc in self._collection.find({"sequence": {"$gt": after}}, "sequence"):
            yield EventDocument.model_validate(doc).to_value()
