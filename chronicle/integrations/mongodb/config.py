"""MongoDB configuration using pydantic-settings."""

from functools import cached_property
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.asynchronous.mongo_client import AsyncMongoClient


class MongoConfiguration(BaseSettings):
    """Configuration and factory for MongoDB resources.

    Implements the HasLifecycle protocol so an ApplicationBuilder can close
    the client on shutdown.

    All settings can be configured via environment variables with the
    CHRONICLE_MONGO_ prefix. For example:
    - CHRONICLE_MONGO_URI=mongodb://localhost:27017
    - CHRONICLE_MONGO_DATABASE=myapp
    - CHRONICLE_MONGO_EVENTS_COLLECTION=domain_events

    Attributes:
        uri: MongoDB connection URI.
        database: Database name to use.
        events_collection: Collection holding the event log.
        read_model_prefix: Prefix of the collections projections write to.
        server_selection_timeout_ms: How long an operation waits for a
            reachable server before failing.

    Example:
        >>> config = MongoConfiguration()
        >>> app = (
        ...     ApplicationBuilder()
        ...     .register_lifecycle(config)
        ...     .use_event_storage(MongoEventStorageBackend(config))
        ...     .use_read_model_store(MongoReadModelStore(config))
        ...     .build()
        ... )
    """

    uri: str = "mongodb://localhost:27017"
    database: str = "chronicle"

    events_collection: str = "events"
    read_model_prefix: str = "read_model_"

    server_selection_timeout_ms: int = 5000

    model_config = SettingsConfigDict(env_prefix="CHRONICLE_MONGO_")

    @cached_property
    def client(self) -> AsyncMongoClient[dict[str, Any]]:
        """The MongoDB async client, created on first use.

        Timestamps come back timezone-aware (UTC).
        """
        return AsyncMongoClient(
            self.uri,
            tz_aware=True,
            serverSelectionTimeoutMS=self.server_selection_timeout_ms,
        )

    @cached_property
    def db(self) -> AsyncDatabase[dict[str, Any]]:
        return self.client[self.database]

    @cached_property
    def events(self) -> AsyncCollection[dict[str, Any]]:
        return self.db[self.events_collection]

    def read_model(self, collection: str) -> AsyncCollection[dict[str, Any]]:
        return self.db[f"{self.read_model_prefix}{collection}"]

    async def on_startup(self) -> None:
        """No-op: connections are established lazily."""
        pass

    async def on_shutdown(self) -> None:
        """Close the MongoDB client if it was created."""
        if "client" in self.__dict__:
            await self.client.close()
