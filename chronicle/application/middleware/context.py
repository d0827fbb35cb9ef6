"""Context propagation middleware for correlation and causation tracking."""

from typing import Any

from ulid import ULID

from ...context import ExecutionContext, get_context, set_context
from ...domain import Command
from ...routing import intercepts
from .base import Handler, Middleware


class ContextPropagationMiddleware(Middleware):
    """Sets the execution context from the incoming command.

    Events emitted by aggregates take their correlation_id and causation_id
    from this context.

    - correlation_id: the command's, or a new one at an entry point
    - causation_id: the command's, or the correlation_id at an entry point
    - command_id: always the command's own id

    The surrounding context is restored after the command, even when it
    fails, so a command dispatched from an event handler leaves the
    handler's context intact.
    """

    @intercepts
    async def propagate_context(self, command: Command, next: Handler) -> Any:
        correlation_id = command.correlation_id
        if correlation_id is None:
            correlation_id = ULID()

        causation_id = command.causation_id
        if causation_id is None:
            causation_id = correlation_id

        previous = get_context()
        set_context(
            ExecutionContext(
                correlation_id=correlation_id,
                causation_id=causation_id,
                command_id=command.command_id,
            )
        )

        try:
            return await next(command)
        finally:
            set_context(previous)
