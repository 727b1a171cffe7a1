"""
Graph Query Service - Single entry point composing the query engine pieces.

Coordinates:
- Cache-first attribute query execution
- Weighted and unweighted path finding
- Plan explanation for diagnostics
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from kgquery.config.errors import InvalidArgumentError
from kgquery.domains.graph import (
    CancellationToken,
    GraphPath,
    GraphQuery,
    GraphQueryResult,
    GraphRepository,
    PropertyValue,
)
from kgquery.domains.query import (
    CacheStatistics,
    CostBasedOptimizer,
    GraphQueryEngine,
    QueryCacheService,
    QueryPlan,
)
from kgquery.domains.traversal import DijkstraPathFinder, GraphTraversalService

if TYPE_CHECKING:
    from kgquery.config.settings import Settings

logger = logging.getLogger(__name__)

__all__ = ["GraphQueryService"]


class GraphQueryService:
    """
    Facade over traversal, planning, execution and caching.

    Example:
        >>> service = GraphQueryService.from_settings(repository)
        >>> result = await service.execute_query(GraphQuery(entity_type="Person"))
        >>> path = await service.find_shortest_path("alice", "charlie")
    """

    def __init__(
        self,
        repository: GraphRepository,
        cache: QueryCacheService | None = None,
        optimizer: CostBasedOptimizer | None = None,
        max_traversal_depth: int = 5,
        default_page_size: int = 100,
        query_timeout: float = 30.0,
    ) -> None:
        """
        Initialize service.

        Args:
            repository: Graph repository shared by every component
            cache: Query result cache (default: 300s TTL)
            optimizer: Query planner (default: 1000-row baseline)
            max_traversal_depth: Default depth bound for all-paths search
            default_page_size: Page size for queries built with ``build_query``
            query_timeout: Timeout in seconds for queries built with ``build_query``
        """
        if repository is None:
            raise InvalidArgumentError("repository")
        self._optimizer = optimizer or CostBasedOptimizer()
        self._cache = cache or QueryCacheService(cache_duration_seconds=300)
        self._engine = GraphQueryEngine(repository, optimizer=self._optimizer)
        self._traversal = GraphTraversalService(repository)
        self._dijkstra = DijkstraPathFinder(repository)
        self._max_depth = max_traversal_depth
        self._page_size = default_page_size
        self._timeout = query_timeout

    @classmethod
    def from_settings(cls, repository: GraphRepository, settings: Settings | None = None) -> GraphQueryService:
        """Build a service configured from Settings."""
        if settings is None:
            from kgquery.config.settings import get_settings

            settings = get_settings()
        return cls(
            repository,
            cache=QueryCacheService(
                cache_duration_seconds=settings.cache_duration_seconds,
                max_entries=settings.cache_max_entries,
            ),
            optimizer=CostBasedOptimizer(settings.optimizer_baseline_cardinality),
            max_traversal_depth=settings.max_traversal_depth,
            default_page_size=settings.default_page_size,
            query_timeout=settings.query_timeout_seconds,
        )

    def build_query(
        self,
        entity_type: str | None = None,
        property_filters: dict[str, PropertyValue] | None = None,
        **overrides: Any,
    ) -> GraphQuery:
        """
        Build a query using the service's default page size and timeout.

        Example:
            >>> query = service.build_query("Person", {"city": "Oslo"}, skip=100)
        """
        fields: dict[str, Any] = {"page_size": self._page_size, "timeout": self._timeout}
        fields.update(overrides)
        return GraphQuery(
            entity_type=entity_type,
            property_filters=property_filters or {},
            **fields,
        )

    async def execute_query(
        self,
        query: GraphQuery,
        cancel_token: CancellationToken | None = None,
    ) -> GraphQueryResult:
        """Serve from cache, else execute and cache the result."""
        if query is None:
            raise InvalidArgumentError("query")

        found, cached = self._cache.try_get(query)
        if found and cached is not None:
            return cached

        result = await self._engine.execute_query(query, cancel_token)
        self._cache.set(query, result)
        return result

    def explain(self, query: GraphQuery) -> QueryPlan:
        """Plan a query without executing it."""
        return self._optimizer.optimize_query(query)

    async def find_shortest_path(
        self,
        source_id: str,
        target_id: str,
        cancel_token: CancellationToken | None = None,
    ) -> GraphPath | None:
        """Lowest total weight path (Dijkstra)."""
        return await self._dijkstra.find_shortest_path(source_id, target_id, cancel_token)

    async def find_unweighted_path(
        self,
        source_id: str,
        target_id: str,
        cancel_token: CancellationToken | None = None,
    ) -> GraphPath | None:
        """Fewest hops path (BFS)."""
        return await self._traversal.breadth_first_search(source_id, target_id, cancel_token)

    async def find_all_paths(
        self,
        source_id: str,
        target_id: str,
        max_depth: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[GraphPath]:
        """Every path up to ``max_depth`` hops (DFS)."""
        depth = self._max_depth if max_depth is None else max_depth
        return await self._traversal.depth_first_search(source_id, target_id, depth, cancel_token)

    def cache_statistics(self) -> CacheStatistics:
        return self._cache.get_cache_statistics()

    def clear_cache(self) -> None:
        self._cache.clear()
