"""Command base class for the write side of CQRS.

Commands represent intentions to change state and are dispatched to aggregates.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field
from ulid import ULID

TResponse = TypeVar("TResponse")


class Command(BaseModel, Generic[TResponse]):
    """Base class for all commands in the system.

    Commands represent intentions to change state and are dispatched to
    command handlers. All commands must include an aggregate_id to identify
    which aggregate instance to operate on. A command is only an intent: it
    is validated against the folded aggregate state when handled.

    Commands are generic over their response type, allowing handlers to
    return typed results. Use `Command[None]` for commands that don't
    return a value.

    Type Parameters:
        TResponse: The type returned by command handlers for this command

    Attributes:
        aggregate_id: ID of the aggregate that should handle this command.
        correlation_id: Optional correlation ID for distributed tracing.
        causation_id: Optional ID of what caused this command.
        command_id: Unique identifier for this command instance.

    Examples:
        >>> class CreateCustomer(Command[None]):
        ...     name: str
        >>>
        >>> class Customer(Aggregate):
        ...     @handles_command
        ...     def handle_create(self, cmd: CreateCustomer) -> None:
        ...         self.emit(CustomerCreated(name=cmd.name))
    """

    aggregate_id: str = Field(min_length=1)
    correlation_id: ULID | None = None
    causation_id: ULID | None = None
    command_id: ULID = Field(default_factory=ULID)
