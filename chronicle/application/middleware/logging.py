"""Logging middleware for command tracing."""

import logging
from typing import Any

from ...context import get_context
from ...domain import ChronicleError, Command
from ...routing import intercepts
from .base import Handler, Middleware

LOGGER = logging.getLogger(__name__)


class LoggingMiddleware(Middleware):
    """Middleware that logs command execution with correlation.

    Logs each command received at the configured level with the command
    type, aggregate id and correlation/causation IDs. Command fields are NOT
    logged to avoid exposing PII. Failures tagged with an ErrorKind are
    logged at WARNING before being re-raised.

    Attributes:
        level: The numeric logging level (e.g., logging.INFO).

    Examples:
        >>> app = (ApplicationBuilder()
        ...     .register_middleware(ContextPropagationMiddleware())
        ...     .register_middleware(LoggingMiddleware("INFO"))
        ...     .build())

    Note:
        Register ContextPropagationMiddleware before this middleware so the
        correlation IDs are already set when the command is logged.
    """

    def __init__(self, level: str = "INFO"):
        """Initialize the logging middleware.

        Args:
            level: Name of the log level (e.g. "INFO", "DEBUG").
                Case-insensitive.
        """
        self.level = getattr(logging, level.upper())

    @intercepts
    async def log_command(self, command: Command, next: Handler) -> Any:
        extra = {
            "command_type": type(command).__name__,
            "aggregate_id": command.aggregate_id,
        }

        ctx = get_context()
        if ctx.correlation_id is not None:
            extra["correlation_id"] = str(ctx.correlation_id)
        if ctx.causation_id is not None:
            extra["causation_id"] = str(ctx.causation_id)
        if ctx.command_id is not None:
            extra["command_id"] = str(ctx.command_id)

        LOGGER.log(self.level, "Received Command", extra=extra)
        try:
            return await next(command)
        except ChronicleError as err:
            LOGGER.warning(
                "Command failed: %s",
                err,
                extra={**extra, "error_kind": err.kind.value},
            )
            raise
