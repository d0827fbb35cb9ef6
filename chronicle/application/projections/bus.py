"""Query bus and routing infrastructure for projections."""

from typing import Any, TypeVar

from ...domain import Query
from .projection import Projection

T = TypeVar("T")


class QueryToProjectionMap:
    """Maps query types to the projection instance that answers them.

    Projections are long-lived singletons, unlike aggregates which are
    rebuilt per command, so the map holds instances.
    """

    @staticmethod
    def from_projections(projections: list[Projection]) -> "QueryToProjectionMap":
        map = QueryToProjectionMap()
        for projection in projections:
            map.add(projection)
        return map

    def __init__(self) -> None:
        self.query_to_projection_map: dict[type[Query[Any]], Projection] = {}

    def add(self, projection: Projection) -> None:
        for query_type in type(projection).handled_query_types():
            self.query_to_projection_map[query_type] = projection

    def get(self, query_type: type[Query[Any]]) -> Projection:
        """Raises KeyError if no projection handles this query type."""
        return self.query_to_projection_map[query_type]


class QueryBus:
    """Routes queries to projections."""

    def __init__(self, query_to_projection_map: QueryToProjectionMap):
        self.query_to_projection_map = query_to_projection_map

    async def dispatch(self, query: Query[T]) -> T:
        projection = self.query_to_projection_map.get(type(query))
        return await projection.query(query)
