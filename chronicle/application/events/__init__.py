"""Event persistence and in-process delivery."""

from .bus import EventBus, EventHandler
from .processing import EventProcessor
from .store import EventStorageBackend, EventStore, InMemoryEventStorageBackend

__all__ = [
    "EventBus",
    "EventHandler",
    "EventProcessor",
    "EventStore",
    "EventStorageBackend",
    "InMemoryEventStorageBackend",
]
