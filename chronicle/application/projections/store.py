"""Persistence adapters for projection records."""

import copy
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

Record = dict[str, Any]


class ReadModelStore(ABC):
    """Minimal storage contract a projection folds events into.

    Records are plain dicts keyed by id inside a named collection. Callers
    get copies: mutating a fetched record has no effect until it is written
    back with ``update``. Adapters do not enforce existence rules; the
    projection decides when an insert or update is legal. Only per-call
    atomicity is assumed.
    """

    @abstractmethod
    async def get(self, collection: str, id: str) -> Record | None:
        """Return the record, or None when absent."""
        ...

    @abstractmethod
    async def insert(self, collection: str, id: str, record: Record) -> None:
        ...

    @abstractmethod
    async def update(self, collection: str, id: str, record: Record) -> None:
        ...

    @abstractmethod
    def find_all(self, collection: str) -> AsyncIterator[tuple[str, Record]]:
        """Iterate over ``(id, record)`` pairs of a collection in id order."""
        ...


class InMemoryReadModelStore(ReadModelStore):
    """Dictionary-backed adapter for tests and single-process use."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, Record]] = {}

    async def get(self, collection: str, id: str) -> Record | None:
        record = self.collections.get(collection, {}).get(id)
        return copy.deepcopy(record) if record is not None else None

    async def insert(self, collection: str, id: str, record: Record) -> None:
        self.collections.setdefault(collection, {})[id] = copy.deepcopy(record)

    async def update(self, collection: str, id: str, record: Record) -> None:
        self.collections.setdefault(collection, {})[id] = copy.deepcopy(record)

    async def find_all(self, collection: str) -> AsyncIterator[tuple[str, Record]]:
        records = self.collections.get(collection, {})
        for id in sorted(records):
            yield id, copy.deepcopy(records[id])
