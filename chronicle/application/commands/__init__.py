"""Command bus and routing infrastructure."""

from .bus import (
    AggregateToRepositoryMap,
    CommandBus,
    CommandHandler,
    CommandResult,
    CommandToAggregateMap,
    DelegateToAggregate,
)

__all__ = [
    "CommandBus",
    "CommandHandler",
    "CommandResult",
    "DelegateToAggregate",
    "CommandToAggregateMap",
    "AggregateToRepositoryMap",
]
