"""
Query Contracts - Interfaces for planning, execution and caching.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from kgquery.domains.graph import CancellationToken, GraphQuery, GraphQueryResult

from .models import CacheStatistics, QueryPlan


@runtime_checkable
class QueryOptimizer(Protocol):
    """Contract for query planning."""

    def optimize_query(self, query: GraphQuery) -> QueryPlan:
        """Build an execution plan without touching storage."""
        ...


@runtime_checkable
class QueryExecutor(Protocol):
    """Contract for query execution."""

    async def execute_query(
        self,
        query: GraphQuery,
        cancel_token: CancellationToken | None = None,
    ) -> GraphQueryResult:
        """Execute a query against storage."""
        ...


@runtime_checkable
class QueryCache(Protocol):
    """Contract for query result caching."""

    def try_get(self, query: GraphQuery) -> tuple[bool, GraphQueryResult | None]:
        """Look up a cached result."""
        ...

    def set(self, query: GraphQuery, result: GraphQueryResult) -> None:
        """Cache a result."""
        ...

    def clear(self) -> None:
        """Remove all cached results."""
        ...

    def get_cache_statistics(self) -> CacheStatistics:
        """Get hit/miss statistics."""
        ...
