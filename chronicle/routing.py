"""Type-based routing of commands, event payloads and queries to methods.

Handler methods are marked with one of the decorators at the bottom of this
module. The message type comes from the annotation of the parameter after
``self``. When a class is defined, its marked methods (inherited ones
included) are collected into a MessageRouter for each route kind; dispatch
goes through ``functools.singledispatch``, so a handler registered for a
base class also receives its subclasses.
"""

import inspect
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from functools import singledispatch
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

_ROUTE_ATTR = "__chronicle_route__"


class RouteKind(str, Enum):
    COMMAND = "command handler"
    APPLIER = "event applier"
    EVENT = "event handler"
    QUERY = "query handler"
    INTERCEPTOR = "interceptor"


@dataclass(frozen=True)
class Route:
    """What a decorated method handles.

    ``wants_envelope`` is set for event handlers annotated as
    ``Event[Payload]``: they are routed by payload type but called with the
    whole stored event.
    """

    kind: RouteKind
    message_type: type
    wants_envelope: bool = False


def message_type_of(func: Callable[..., Any]) -> tuple[type, bool]:
    """Read ``(message_type, wants_envelope)`` from a handler signature.

    Raises:
        ValueError: If the handler takes no message or leaves it unannotated.
    """
    params = list(inspect.signature(func).parameters.values())
    if len(params) < 2:
        raise ValueError(f"Handler {func.__qualname__} must take a message after self")

    param = params[1]
    if param.annotation is inspect.Parameter.empty:
        raise ValueError(
            f"Handler {func.__qualname__} parameter '{param.name}' must have a type annotation"
        )

    from .domain import Event

    annotation = param.annotation
    if isinstance(annotation, type) and issubclass(annotation, Event):
        # Event[X] is a concrete pydantic subclass carrying X in its metadata
        args = annotation.__pydantic_generic_metadata__["args"]
        if not args:
            raise ValueError(
                f"Handler {func.__qualname__} must name the payload, e.g. Event[CustomerCreated]"
            )
        return args[0], True
    return annotation, False


class MessageRouter:
    """Dispatches messages of one route kind to the methods of one class.

    A strict router raises NotImplementedError for messages nothing handles;
    a lenient one returns None so the caller can fall through.
    """

    __slots__ = ("kind", "strict", "_dispatch")

    def __init__(self, kind: RouteKind, strict: bool = False):
        self.kind = kind
        self.strict = strict

        @singledispatch
        def unrouted(message: object, instance: object, *args: Any, envelope: Any = None) -> None:
            if strict:
                raise NotImplementedError(
                    f"{type(instance).__name__} has no {kind.value} for {type(message).__name__}"
                )
            return None

        self._dispatch = unrouted

    @classmethod
    def for_class(cls, owner: type, kind: RouteKind, strict: bool = False) -> "MessageRouter":
        """Collect the methods of ``owner`` marked for ``kind``.

        Base classes are visited first, so a subclass method registered for
        the same message type replaces the inherited one.
        """
        router = cls(kind, strict)
        for klass in reversed(owner.__mro__):
            for member in vars(klass).values():
                route = getattr(member, _ROUTE_ATTR, None)
                if isinstance(route, Route) and route.kind is kind:
                    router.register(route, member)
        return router

    def register(self, route: Route, method: Callable[..., Any]) -> None:
        if route.wants_envelope:

            def call(message: object, instance: object, *args: Any, envelope: Any = None) -> Any:
                return method(instance, message if envelope is None else envelope, *args)

        else:

            def call(message: object, instance: object, *args: Any, envelope: Any = None) -> Any:
                return method(instance, message, *args)

        self._dispatch.register(route.message_type, call)

    def registered_types(self) -> set[type]:
        """Message types with an explicit handler."""
        return {t for t in self._dispatch.registry if t is not object}

    def unhandled(self, message_types: Iterable[type]) -> set[type]:
        """The given types that would reach the default instead of a handler."""
        default = self._dispatch.registry[object]
        return {t for t in message_types if self._dispatch.dispatch(t) is default}

    def route(self, instance: Any, message: Any, *args: Any, envelope: Any = None) -> Any:
        """Call the handler registered for ``type(message)`` on ``instance``.

        Extra positional arguments are passed through (middleware gets the
        next handler this way). ``envelope`` is the stored event around an
        event payload.
        """
        return self._dispatch(message, instance, *args, envelope=envelope)


def _mark(func: F, kind: RouteKind) -> F:
    message_type, wants_envelope = message_type_of(func)
    setattr(func, _ROUTE_ATTR, Route(kind, message_type, wants_envelope))
    return func


def handles_command(func: F) -> F:
    """Mark an aggregate method as the handler of its annotated command.

    Example:
        >>> class Customer(Aggregate):
        ...     @handles_command
        ...     def handle_create(self, cmd: CreateCustomer) -> None:
        ...         self.emit(CustomerCreated(name=cmd.name))
    """
    return _mark(func, RouteKind.COMMAND)


def applies_event(func: F) -> F:
    """Mark an aggregate method as the applier of its annotated payload."""
    return _mark(func, RouteKind.APPLIER)


def handles_event(func: F) -> F:
    """Mark a processor or projection method as an event handler.

    Annotate the parameter as ``Event[Payload]`` to receive the stored event
    (aggregate id, sequence, timestamp) instead of the bare payload.

    Example:
        >>> class CustomerListProjection(Projection):
        ...     @handles_event
        ...     async def on_created(self, event: Event[CustomerCreated]) -> None:
        ...         await self.adapter.insert("customers", event.aggregate_id, {...})
    """
    return _mark(func, RouteKind.EVENT)


def handles_query(func: F) -> F:
    """Mark a projection method as the answer to its annotated query."""
    return _mark(func, RouteKind.QUERY)


def intercepts(func: F) -> F:
    """Mark a middleware method as an interceptor.

    Annotate with Command to see every command, or with a concrete command
    type to see only that one. The method also receives the next handler.
    """
    return _mark(func, RouteKind.INTERCEPTOR)
