"""Domain primitives for event sourcing and CQRS.

This module contains the core building blocks that users extend to create
their domain models:

- Aggregate: Base class for domain aggregates that emit events
- Command: Base class for command messages (write side)
- Query: Base class for query messages (read side)
- DomainEvent: Base class for event payloads
- Event: Immutable envelope stored in the event log
- ChronicleError and its subclasses: the error taxonomy
"""

from .aggregate import Aggregate
from .command import Command
from .event import DomainEvent, Event, utc_now
from .exceptions import (
    ChronicleError,
    DomainRuleViolation,
    ErrorKind,
    ProjectionInvariantViolation,
    StoreUnavailable,
    UnsupportedCommand,
)
from .query import Query

__all__ = [
    "Aggregate",
    "Command",
    "Query",
    "DomainEvent",
    "Event",
    "utc_now",
    "ChronicleError",
    "DomainRuleViolation",
    "ErrorKind",
    "ProjectionInvariantViolation",
    "StoreUnavailable",
    "UnsupportedCommand",
]
