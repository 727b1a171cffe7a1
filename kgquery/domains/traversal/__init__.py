"""
Traversal Domain - Path finding over the knowledge graph.

This domain handles:
- Unweighted shortest path (BFS)
- Bounded-depth all-paths enumeration (DFS)
- Weighted shortest path (Dijkstra)
"""

from .contracts import GraphTraverser, PathFinder
from .dijkstra import DijkstraPathFinder
from .traversal import GraphTraversalService

__all__ = [
    # Contracts
    "PathFinder",
    "GraphTraverser",
    # Implementations
    "GraphTraversalService",
    "DijkstraPathFinder",
]
