"""MongoDB persistence adapter for projections."""

from collections.abc import AsyncIterator
from typing import Any

from chronicle.application.projections import ReadModelStore, Record
from chronicle.integrations.mongodb.collection import IndexedCollection
from chronicle.integrations.mongodb.config import MongoConfiguration


class MongoReadModelStore(ReadModelStore):
    """Keeps each read model collection in its own MongoDB collection.

    The record id is the document ``_id``; the record fields are stored
    flat next to it. Collection names get the configured
    ``read_model_prefix``. Driver errors surface as StoreUnavailable.
    """

    def __init__(self, config: MongoConfiguration) -> None:
        self._config = config
        self._collections: dict[str, IndexedCollection] = {}

    def _collection(self, name: str) -> IndexedCollection:
        if name not in self._collections:
            self._collections[name] = IndexedCollection(self._config.read_model(name))
        return self._collections[name]

    async def get(self, collection: str, id: str) -> Record | None:
        doc = await self._collection(collection).find_one({"_id": id})
        return _to_record(doc) if doc is not None else None

    async def insert(self, collection: str, id: str, record: Record) -> None:
        await self._collection(collection).insert_one({**record, "_id": id})

    async def update(self, collection: str, id: str, record: Record) -> None:
        await self._collection(collection).replace_one({"_id": id}, _to_record(record))

    async def find_all(self, collection: str) -> AsyncIterator[tuple[str, Record]]:
        async for doc in self._collection(collection).find({}, "_id"):
            yield doc["_id"], _to_record(doc)


def _to_record(doc: dict[str, Any]) -> Record:
    return {key: value for key, value in doc.items() if key != "_id"}
