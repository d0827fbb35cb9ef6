"""Given/when/then scenarios for aggregates and projections."""

from .aggregate_scenario import AggregateScenario
from .projection_scenario import ProjectionScenario

__all__ = [
    "AggregateScenario",
    "ProjectionScenario",
]
