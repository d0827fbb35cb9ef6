"""Projections: the read side of CQRS."""

from .bus import QueryBus, QueryToProjectionMap
from .projection import Projection
from .store import InMemoryReadModelStore, ReadModelStore, Record

__all__ = [
    "Projection",
    "QueryBus",
    "QueryToProjectionMap",
    "ReadModelStore",
    "InMemoryReadModelStore",
    "Record",
]
