"""
Query Domain - Attribute queries over entities.

This domain handles:
- Cost-based query planning
- Timeout- and cancellation-aware execution
- Result caching with TTL
"""

from .cache import QueryCacheService
from .contracts import QueryCache, QueryExecutor, QueryOptimizer
from .engine import GraphQueryEngine
from .models import CacheStatistics, PlanStep, QueryPlan
from .optimizer import CostBasedOptimizer, estimate_filter_selectivity

__all__ = [
    # Contracts
    "QueryOptimizer",
    "QueryExecutor",
    "QueryCache",
    # Models
    "PlanStep",
    "QueryPlan",
    "CacheStatistics",
    # Implementations
    "CostBasedOptimizer",
    "GraphQueryEngine",
    "QueryCacheService",
    "estimate_filter_selectivity",
]
