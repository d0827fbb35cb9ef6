"""Async MongoDB collection wrapper shared by the chronicle backends."""

from collections.abc import AsyncIterator, Iterator
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel, ConfigDict
from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from chronicle.domain import StoreUnavailable

Document = dict[str, Any]


class IndexSpec(BaseModel):
    """An ascending index over one or more fields."""

    model_config = ConfigDict(frozen=True)

    names: tuple[str, ...]
    unique: bool = False

    @property
    def keys(self) -> list[tuple[str, int]]:
        return [(name, ASCENDING) for name in self.names]


@contextmanager
def _unavailable_on_driver_error(operation: str, collection: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as err:
        raise StoreUnavailable(f"MongoDB {operation} on {collection} failed: {err}") from err


class IndexedCollection:
    """One MongoDB collection with its indexes created before first use.

    Every driver error is raised as StoreUnavailable naming the operation,
    so the backends only deal with documents.
    """

    def __init__(
        self, collection: AsyncCollection[Document], indexes: list[IndexSpec] | None = None
    ) -> None:
        self._collection = collection
        self._indexes = indexes or []
        self._ready = False

    @property
    def name(self) -> str:
        return self._collection.name

    async def ensure_indexes(self) -> None:
        if self._ready:
            return
        with _unavailable_on_driver_error("index creation", self.name):
            for spec in self._indexes:
                await self._collection.create_index(spec.keys, unique=spec.unique)
        self._ready = True

    async def find_one(self, filter: Document) -> Document | None:
        await self.ensure_indexes()
        with _unavailable_on_driver_error("read", self.name):
            return await self._collection.find_one(filter)

    async def find(self, filter: Document, sort_by: str) -> AsyncIterator[Document]:
        """Matching documents in ascending ``sort_by`` order."""
        await self.ensure_indexes()
        with _unavailable_on_driver_error("scan", self.name):
            async for doc in self._collection.find(filter).sort(sort_by, ASCENDING):
                yield doc

    async def last(self, sort_by: str) -> Document | None:
        """The document with the highest ``sort_by`` value, if any."""
        await self.ensure_indexes()
        with _unavailable_on_driver_error("read", self.name):
            return await self._collection.find_one({}, sort=[(sort_by, DESCENDING)])

    async def insert_one(self, document: Document) -> None:
        await self.ensure_indexes()
        with _unavailable_on_driver_error("insert", self.name):
            await self._collection.insert_one(document)

    async def replace_one(self, filter: Document, replacement: Document) -> None:
        await self.ensure_indexes()
        with _unavailable_on_driver_error("replace", self.name):
            await self._collection.replace_one(filter, replacement)
