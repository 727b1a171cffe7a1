"""
Traversal Contracts - Interfaces for path-finding.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from kgquery.domains.graph import CancellationToken, GraphPath


@runtime_checkable
class PathFinder(Protocol):
    """Contract for single shortest-path search."""

    async def find_shortest_path(
        self,
        source_id: str,
        target_id: str,
        cancel_token: CancellationToken | None = None,
    ) -> GraphPath | None:
        """Find the best path, or None if unreachable."""
        ...


@runtime_checkable
class GraphTraverser(Protocol):
    """Contract for unweighted traversal."""

    async def breadth_first_search(
        self,
        source_id: str,
        target_id: str,
        cancel_token: CancellationToken | None = None,
    ) -> GraphPath | None:
        """Find the shortest path by hop count."""
        ...

    async def depth_first_search(
        self,
        source_id: str,
        target_id: str,
        max_depth: int = 5,
        cancel_token: CancellationToken | None = None,
    ) -> list[GraphPath]:
        """Enumerate all bounded-depth paths."""
        ...
