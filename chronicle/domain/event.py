from datetime import datetime, timezone
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, computed_field
from ulid import ULID


def utc_now() -> datetime:
    """Get the current UTC timestamp.

    Returns:
        Current datetime with UTC timezone information

    Note:
        Used as default_factory for Event.timestamp to ensure all
        events are timestamped in UTC regardless of system timezone.
    """
    return datetime.now(tz=timezone.utc)


class DomainEvent(BaseModel):
    """Base class for event payloads.

    Every concrete payload declares ``event_name``, its tag in the closed set
    of event kinds of its domain (usually the value of a ``str`` enum). The
    tag is what read models and external consumers see as ``Event.name``;
    in-process routing uses the payload class itself.

    Examples:
        >>> class CustomerCreated(DomainEvent):
        ...     event_name: ClassVar[str] = "CUSTOMER_CREATED"
        ...     name: str
    """

    model_config = ConfigDict(frozen=True)

    event_name: ClassVar[str]

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)  # type: ignore[arg-type]
        if "event_name" not in cls.__dict__:
            cls.event_name = cls.__name__


T = TypeVar("T", bound=DomainEvent)


class Event(BaseModel, Generic[T]):
    """Immutable record of a domain fact.

    Each event represents something that happened to an aggregate. Events are:

    - **Immutable**: Once created, events cannot be modified
    - **Ordered**: The event store assigns a global ``sequence`` on append
    - **Tagged**: ``name`` is the payload's event kind
    - **Timestamped**: All events record when they occurred (UTC)
    - **Traceable**: Events can include correlation/causation IDs

    Events are created by aggregates via ``emit()`` with ``sequence == 0``.
    ``EventStore.append`` returns a copy carrying the assigned sequence; that
    copy is what gets persisted and published.

    Type Parameters:
        T: DomainEvent subclass defining the payload schema

    Attributes:
        id: Unique identifier for this specific event instance
        aggregate_id: ID of the aggregate that produced this event
        data: Typed event payload (e.g., CustomerCreated)
        sequence: Position in the global event log (1-indexed, 0 until appended)
        timestamp: When the event occurred (UTC timezone)
        correlation_id: Optional correlation ID for tracing the whole operation
        causation_id: Optional ID of what caused this event (typically the command_id)
    """

    model_config = ConfigDict(frozen=True)

    id: ULID = Field(
        default_factory=ULID,
        description="Unique identifier for this event instance",
    )
    aggregate_id: str = Field(description="ID of the aggregate that produced this event")
    data: SerializeAsAny[T] = Field(description="Typed event payload conforming to schema T")
    sequence: int = Field(
        default=0,
        ge=0,
        description="Position in the global event log (1-indexed, 0 until appended)",
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC timezone)",
    )
    correlation_id: ULID | None = Field(
        default=None,
        description="Correlation ID for tracing the entire logical operation",
    )
    causation_id: ULID | None = Field(
        default=None,
        description="ID of what directly caused this event (typically the command_id)",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def name(self) -> str:
        """The event kind tag of the payload."""
        return type(self.data).event_name

    @property
    def is_committed(self) -> bool:
        return self.sequence > 0
