from datetime import datetime
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, Field

from ..context import get_context
from ..routing import MessageRouter, RouteKind
from .event import DomainEvent, Event, utc_now


T = TypeVar("T", bound=DomainEvent)


class Aggregate(BaseModel):
    """Base class for all event-sourced aggregates.

    An aggregate is never persisted directly. Its current state is the fold
    of its ordered event history, starting from the field defaults of the
    subclass (the "nonexistent" state). Two aggregates with identical
    histories therefore always have identical state.

    Command handling and event application are routed by type annotation.
    Use @handles_command to mark command handler methods and @applies_event
    to mark event applier methods. Command handlers validate against the
    current (folded) state, raise DomainRuleViolation when a rule is broken,
    and call ``emit`` for every fact that follows from the command. Appliers
    must be pure: they only assign fields from the payload.

    Examples:
        >>> class OpenAccount(Command):
        ...     owner: str
        >>>
        >>> class AccountOpened(DomainEvent):
        ...     owner: str
        >>>
        >>> class Account(Aggregate):
        ...     owner: str = ""
        ...
        ...     @handles_command
        ...     def handle_open(self, cmd: OpenAccount) -> None:
        ...         if self.owner:
        ...             raise DomainRuleViolation("account already opened")
        ...         self.emit(AccountOpened(owner=cmd.owner))
        ...
        ...     @applies_event
        ...     def apply_opened(self, evt: AccountOpened) -> None:
        ...         self.owner = evt.owner

    Attributes:
        id: Identifier of this aggregate instance.
        version: Number of events folded into this instance, including
            uncommitted ones.
        last_event_time: Timestamp of the most recent event, if any.
        uncommitted_events: Events emitted but not yet appended to the
            event store. Excluded from serialization.
    """

    id: str
    version: int = 0
    last_event_time: datetime | None = None
    uncommitted_events: list[Event[Any]] = Field(default_factory=list, exclude=True)

    # Class-level routing tables
    _command_router: ClassVar[MessageRouter]
    _event_router: ClassVar[MessageRouter]

    def __init_subclass__(cls, **kwargs: object) -> None:
        """Set up command and event routing when a subclass is defined."""
        super().__init_subclass__(**kwargs)  # type: ignore[arg-type]
        cls._command_router = MessageRouter.for_class(cls, RouteKind.COMMAND, strict=True)
        cls._event_router = MessageRouter.for_class(cls, RouteKind.APPLIER)

    @classmethod
    def handled_command_types(cls) -> set[type]:
        return cls._command_router.registered_types()

    @classmethod
    def applied_event_types(cls) -> set[type]:
        return cls._event_router.registered_types()

    def handle(self, command: BaseModel) -> object:
        """Route a command to its registered handler method.

        Raises:
            NotImplementedError: If no handler is registered for this command type.
        """
        return self._command_router.route(self, command)

    def apply(self, payload: DomainEvent) -> object:
        """Route an event payload to its registered applier method."""
        return self._event_router.route(self, payload)

    def emit(self, data: T) -> None:
        """Record a new domain event and apply it to the aggregate state.

        The event is created unsequenced; the event store assigns its
        position on append. correlation_id and causation_id are taken from
        the current execution context (causation is the running command).

        Args:
            data: The event payload describing what happened.
        """
        self.version += 1
        current_time = utc_now()
        ctx = get_context()

        event: Event[T] = Event(
            aggregate_id=self.id,
            data=data,
            timestamp=current_time,
            correlation_id=ctx.correlation_id,
            causation_id=ctx.command_id,
        )
        self.last_event_time = current_time
        self.uncommitted_events.append(event)
        self.apply(data)

    def changed_since(self, version: int) -> bool:
        return self.version > version

    def get_uncommitted_events(self) -> list[Event[Any]]:
        return self.uncommitted_events

    def clear_uncommitted_events(self) -> None:
        self.uncommitted_events.clear()

    def replay_events(self, events: list[Event[Any]]) -> None:
        """Fold a stored history into this instance, oldest first.

        Args:
            events: Committed events of this aggregate in sequence order.
        """
        for event in events:
            self.apply(event.data)
            self.version += 1
            self.last_event_time = event.timestamp
