import contextvars
from dataclasses import dataclass, replace

from ulid import ULID


@dataclass(frozen=True)
class ExecutionContext:
    """Immutable context tracking the causal chain of one logical operation.

    Attributes:
        correlation_id: Traces an entire logical operation across every
            command and event. Constant throughout the flow.
        causation_id: ID of what directly caused the current operation.
        command_id: The command currently being executed. Events emitted
            while it runs use it as their causation_id.

    Examples:
        >>> ctx = ExecutionContext.create()
        >>> cmd_ctx = ctx.for_command(command.command_id)
        >>> set_context(cmd_ctx)
    """

    correlation_id: ULID | None = None
    causation_id: ULID | None = None
    command_id: ULID | None = None

    @classmethod
    def create(cls, correlation_id: ULID | None = None) -> "ExecutionContext":
        """Create a new context at a system entry point.

        At entry points causation_id is the correlation_id itself.
        """
        if correlation_id is None:
            correlation_id = ULID()

        return cls(
            correlation_id=correlation_id,
            causation_id=correlation_id,
            command_id=None,
        )

    def for_command(self, command_id: ULID) -> "ExecutionContext":
        return replace(self, command_id=command_id)

    def for_event(self, event_id: ULID) -> "ExecutionContext":
        """Child context for processing an event: the event becomes the cause."""
        return replace(self, causation_id=event_id, command_id=None)


_context: contextvars.ContextVar[ExecutionContext | None] = contextvars.ContextVar(
    "execution_context", default=None
)


def get_context() -> ExecutionContext:
    """Get the current execution context.

    If no context has been set, returns an empty ExecutionContext with all fields None.
    """
    ctx = _context.get()
    if ctx is None:
        return ExecutionContext()
    return ctx


def set_context(context: ExecutionContext) -> None:
    _context.set(context)


def clear_context() -> None:
    _context.set(None)
