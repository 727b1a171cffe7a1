"""
kgquery - Knowledge graph query engine.

Path finding (BFS, bounded DFS, Dijkstra) and attribute queries with
cost-based planning and result caching over a pluggable graph repository.

Example:
    >>> from kgquery.adapters import InMemoryGraphRepository
    >>> from kgquery.domains.orchestration import GraphQueryService
    >>> service = GraphQueryService(InMemoryGraphRepository())
    >>> path = await service.find_shortest_path("alice", "charlie")
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
