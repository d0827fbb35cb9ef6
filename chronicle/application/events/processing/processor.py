"""Event processors: the routing half of the read side."""

import inspect
from typing import Any, ClassVar

from ....context import get_context, set_context
from ....domain import Event
from ....routing import MessageRouter, RouteKind


class EventProcessor:
    """Base class for anything that reacts to stored events.

    Subclass EventProcessor and use the @handles_event decorator to declare
    which event payloads the processor is interested in. Routing is set up
    from the handler type annotations when the subclass is defined. Events
    without a handler are ignored, so a processor only has to list what it
    cares about.

    A handler annotated with the bare payload type receives the payload; one
    annotated as ``Event[Payload]`` receives the full envelope (aggregate id,
    sequence, timestamp).

    Example:
        >>> class WelcomeMailer(EventProcessor):
        ...     @handles_event
        ...     async def on_created(self, event: Event[CustomerCreated]) -> None:
        ...         await send_welcome(event.aggregate_id, event.data.email)
    """

    _event_router: ClassVar[MessageRouter]

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        cls._event_router = MessageRouter.for_class(cls, RouteKind.EVENT)

    @classmethod
    def handled_event_types(cls) -> set[type]:
        return cls._event_router.registered_types()

    async def handle(self, event: Event[Any]) -> object:
        """Route a stored event to its registered handler method.

        The execution context is switched to the event for the duration of
        the handler so any follow-up work is caused by this event.

        Args:
            event: The stored event envelope.

        Returns:
            The return value of the handler method (typically None).
        """
        previous = get_context()
        set_context(previous.for_event(event.id))
        try:
            result = self._event_router.route(self, event.data, envelope=event)
            if inspect.isawaitable(result):
                return await result
            return result
        finally:
            set_context(previous)
