"""chronicle - minimal event sourcing and CQRS for Python.

Commands are validated against aggregates folded from an append-only event
log; stored events are fanned out synchronously to projections, which can
rebuild themselves from the log at any time.
"""

from .application import Application, ApplicationBuilder
from .application.events import EventBus, EventStore
from .application.projections import Projection, ReadModelStore
from .domain import (
    Aggregate,
    ChronicleError,
    Command,
    DomainEvent,
    DomainRuleViolation,
    ErrorKind,
    Event,
    ProjectionInvariantViolation,
    Query,
    StoreUnavailable,
    UnsupportedCommand,
)
from .routing import (
    applies_event,
    handles_command,
    handles_event,
    handles_query,
    intercepts,
)

__all__ = [
    # Application
    "Application",
    "ApplicationBuilder",
    "EventBus",
    "EventStore",
    "Projection",
    "ReadModelStore",
    # Domain primitives
    "Aggregate",
    "Command",
    "DomainEvent",
    "Event",
    "Query",
    # Errors
    "ChronicleError",
    "DomainRuleViolation",
    "ErrorKind",
    "ProjectionInvariantViolation",
    "StoreUnavailable",
    "UnsupportedCommand",
    # Decorators
    "applies_event",
    "handles_command",
    "handles_event",
    "handles_query",
    "intercepts",
]
