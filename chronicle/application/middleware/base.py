"""Base middleware class for commands.

Middleware components wrap the command handler to provide cross-cutting
concerns like logging, context propagation or authorisation.
"""

import inspect
from collections.abc import Callable, Coroutine
from typing import Any, ClassVar

from pydantic import BaseModel

from ...routing import MessageRouter, RouteKind

Handler = Callable[[BaseModel], Coroutine[Any, Any, Any]]


class Middleware:
    """Base class for middleware with annotation-based routing.

    Middleware follows the chain of responsibility pattern. Methods marked
    with @intercepts receive messages matching their annotated type together
    with the next handler in the chain. Messages no interceptor matches are
    forwarded unchanged.

    Examples:
        >>> class RejectEmptyNames(Middleware):
        ...     @intercepts
        ...     async def check(self, cmd: CreateCustomer, next: Handler) -> Any:
        ...         if not cmd.name.strip():
        ...             raise DomainRuleViolation("customer name must not be empty")
        ...         return await next(cmd)
    """

    _command_router: ClassVar[MessageRouter]

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        cls._command_router = MessageRouter.for_class(cls, RouteKind.INTERCEPTOR)

    async def intercept(self, message: BaseModel, next: Handler) -> Any:
        """Route a message to an interceptor method or forward it to next."""
        result = self._command_router.route(self, message, next)

        # No interceptor matched
        if result is None:
            return await next(message)
        elif inspect.isawaitable(result):
            return await result
        else:
            return result
