"""MongoDB integration for chronicle.

Provides MongoDB implementations of EventStorageBackend and ReadModelStore
using PyMongo's native async API.

Installation:
    pip install chronicle[mongodb]

Usage:
    >>> from chronicle.integrations.mongodb import (
    ...     MongoConfiguration,
    ...     MongoEventStorageBackend,
    ...     MongoReadModelStore,
    ... )
    >>>
    >>> config = MongoConfiguration(uri="mongodb://localhost:27017", database="myapp")
    >>> app = (
    ...     ApplicationBuilder()
    ...     .register_lifecycle(config)
    ...     .use_event_storage(MongoEventStorageBackend(config))
    ...     .use_read_model_store(MongoReadModelStore(config))
    ...     .register_aggregate(Customer)
    ...     .register_projection(CustomerListProjection)
    ...     .build()
    ... )
"""

from .config import MongoConfiguration
from .event_store import EventDocument, MongoEventStorageBackend
from .read_model_store import MongoReadModelStore

__all__ = [
    "MongoConfiguration",
    "MongoEventStorageBackend",
    "MongoReadModelStore",
    "EventDocument",
]
