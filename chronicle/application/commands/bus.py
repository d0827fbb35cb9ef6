"""Command bus and routing infrastructure."""

from collections.abc import Callable, Coroutine
from functools import reduce
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from ...domain import Aggregate, ChronicleError, Command, ErrorKind, UnsupportedCommand
from ..aggregates import AggregateRepository
from ..middleware import Middleware

T = TypeVar("T")

CommandHandler = Callable[[Command[Any]], Coroutine[Any, Any, Any]]


class CommandToAggregateMap:
    @staticmethod
    def from_aggregates(
        aggregates: list[type[Aggregate]],
    ) -> "CommandToAggregateMap":
        map = CommandToAggregateMap()
        for aggregate in aggregates:
            map.add(aggregate)
        return map

    def __init__(self) -> None:
        self.command_to_aggregate_map: dict[type, type[Aggregate]] = {}

    def add(self, aggregate_type: type[Aggregate]) -> None:
        for command_type in aggregate_type.handled_command_types():
            self.command_to_aggregate_map[command_type] = aggregate_type

    def get(self, command_type: type[Command[Any]]) -> type[Aggregate]:
        try:
            return self.command_to_aggregate_map[command_type]
        except KeyError:
            raise UnsupportedCommand(
                f"No aggregate handles command type {command_type.__name__}"
            ) from None


class AggregateToRepositoryMap:
    @staticmethod
    def from_repositories(
        repositories: list[AggregateRepository[Any]],
    ) -> "AggregateToRepositoryMap":
        map = AggregateToRepositoryMap()
        for repository in repositories:
            map.add(repository)
        return map

    def __init__(self) -> None:
        self.aggregate_to_repository_map: dict[type[Aggregate], AggregateRepository[Any]] = {}

    def add(self, repository: AggregateRepository[Any]) -> None:
        self.aggregate_to_repository_map[repository.aggregate_type] = repository

    def get(self, aggregate_type: type[Aggregate]) -> AggregateRepository[Any]:
        return self.aggregate_to_repository_map[aggregate_type]


class DelegateToAggregate:
    """Root command handler: hands a command to the repository of its aggregate.

    Holds nothing but the two lookup maps, so it is stateless between
    commands.
    """

    def __init__(
        self,
        command_to_aggregate_map: CommandToAggregateMap,
        aggregate_to_repository_map: AggregateToRepositoryMap,
    ):
        self.command_to_aggregate_map = command_to_aggregate_map
        self.aggregate_to_repository_map = aggregate_to_repository_map

    async def handle(self, command: Command[T]) -> T:
        aggregate_type = self.command_to_aggregate_map.get(type(command))
        repository = self.aggregate_to_repository_map.get(aggregate_type)
        return await repository.apply(command.aggregate_id, command)


class CommandResult(BaseModel, Generic[T]):
    """Outcome of CommandBus.try_dispatch.

    Exactly one of ``value`` (on success) or ``error_kind``/``message`` (on
    failure) is meaningful, as told by ``ok``.
    """

    ok: bool
    value: T | None = None
    error_kind: ErrorKind | None = None
    message: str | None = None

    @classmethod
    def success(cls, value: T | None = None) -> "CommandResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ChronicleError) -> "CommandResult[T]":
        return cls(ok=False, error_kind=error.kind, message=str(error))


class CommandBus:
    """Command bus for dispatching commands through middleware.

    The CommandBus manages the middleware chain and delegates commands
    to the appropriate aggregate for handling. Middleware is applied in
    registration order. dispatch() returns only after the resulting events
    have been appended and delivered to every projection.

    Args:
        root_handler: The final handler that delegates to aggregates.
        middleware: List of middleware to apply (in order).
    """

    def __init__(
        self,
        root_handler: DelegateToAggregate,
        middleware: list[Middleware],
    ):
        self.root_handler = root_handler
        self.middleware = middleware
        # Build the middleware chain by reducing from right to left
        self.chain: Callable[[Command[Any]], Coroutine[Any, Any, Any]] = reduce(
            lambda next, mw: lambda cmd, n=next, m=mw: m.intercept(cmd, n),
            reversed(middleware),
            self.root_handler.handle,
        )

    async def dispatch(self, command: Command[T]) -> T:
        """Dispatch command through the middleware chain to its aggregate.

        Raises:
            UnsupportedCommand: If no aggregate handles the command type.
            DomainRuleViolation: If the command breaks an aggregate rule.
            StoreUnavailable: If the event store could not persist.
            ProjectionInvariantViolation: If a read model rejected an event.
        """
        return await self.chain(command)

    async def try_dispatch(self, command: Command[T]) -> CommandResult[T]:
        """Dispatch a command and report chronicle failures as a value.

        Errors outside the ChronicleError taxonomy still propagate.
        """
        try:
            value = await self.dispatch(command)
        except ChronicleError as err:
            return CommandResult.failure(err)
        return CommandResult.success(value)
