"""
Graph Traversal Service - Breadth-first and depth-first path search.

Both searches follow outgoing relationships only (undirected relationships
count as outgoing from either end) and expand nodes in the order the
repository returns their relationships.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator

from kgquery.config.errors import InvalidArgumentError
from kgquery.domains.graph import (
    CancellationToken,
    Entity,
    GraphPath,
    GraphRepository,
    Relationship,
)

from .paths import ParentMap, materialize_path, trace_back

logger = logging.getLogger(__name__)

__all__ = ["GraphTraversalService"]


class GraphTraversalService:
    """
    Unweighted traversal over a graph repository.

    Example:
        >>> traversal = GraphTraversalService(repository)
        >>> path = await traversal.breadth_first_search("alice", "charlie")
        >>> print(path.to_string())
        [Alice] --KNOWS--> [Bob] --KNOWS--> [Charlie]
    """

    def __init__(self, repository: GraphRepository) -> None:
        """
        Initialize traversal service.

        Args:
            repository: Graph repository used to expand nodes

        Raises:
            InvalidArgumentError: If repository is None
        """
        if repository is None:
            raise InvalidArgumentError("repository")
        self._repository = repository

    async def breadth_first_search(
        self,
        source_id: str,
        target_id: str,
        cancel_token: CancellationToken | None = None,
    ) -> GraphPath | None:
        """
        Find the shortest path by hop count.

        Args:
            source_id: Source entity ID
            target_id: Target entity ID
            cancel_token: Optional cancellation signal, checked per expanded node

        Returns:
            Shortest path (total_weight 0), or None if the target is unreachable
        """
        if source_id == target_id:
            return await self._single_entity_path(source_id, cancel_token)

        queue: deque[str] = deque([source_id])
        visited = {source_id}
        parents: ParentMap = {}

        while queue:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            current = queue.popleft()
            if current == target_id:
                ids, relationships = trace_back(source_id, target_id, parents)
                logger.debug("BFS found %s -> %s in %d hops", source_id, target_id, len(relationships))
                return await materialize_path(
                    self._repository, ids, relationships, cancel_token=cancel_token
                )

            for rel in await self._outgoing(current, cancel_token):
                neighbor = rel.neighbor_of(current)
                if neighbor is None or neighbor in visited:
                    continue
                visited.add(neighbor)
                parents[neighbor] = (current, rel)
                queue.append(neighbor)

        logger.debug("BFS found no path %s -> %s (%d visited)", source_id, target_id, len(visited))
        return None

    async def depth_first_search(
        self,
        source_id: str,
        target_id: str,
        max_depth: int = 5,
        cancel_token: CancellationToken | None = None,
    ) -> list[GraphPath]:
        """
        Enumerate every path from source to target with at most ``max_depth`` hops.

        An entity never appears twice on the same path, but may appear on
        several returned paths.

        Args:
            source_id: Source entity ID
            target_id: Target entity ID
            max_depth: Maximum number of hops per path
            cancel_token: Optional cancellation signal, checked per expanded node

        Returns:
            Paths in discovery order; empty if none exist
        """
        if max_depth < 0:
            raise InvalidArgumentError("max_depth", f"max_depth must be >= 0, got {max_depth}")

        paths: list[GraphPath] = []
        entity_cache: dict[str, Entity | None] = {}
        on_path: list[str] = [source_id]
        on_path_set: set[str] = {source_id}
        path_rels: list[Relationship] = []

        async def collect() -> None:
            path = await materialize_path(
                self._repository,
                list(on_path),
                path_rels,
                cancel_token=cancel_token,
                entity_cache=entity_cache,
            )
            if path is not None:
                paths.append(path)

        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        if source_id == target_id:
            await collect()
            return paths

        # One frame per entity on the current path; len(path_rels) == len(stack) - 1
        stack: list[tuple[str, Iterator[Relationship]]] = []
        if max_depth > 0:
            stack.append((source_id, iter(await self._outgoing(source_id, cancel_token))))

        while stack:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            current, rels = stack[-1]
            rel = next(rels, None)
            if rel is None:
                stack.pop()
                on_path.pop()
                on_path_set.discard(current)
                if path_rels:
                    path_rels.pop()
                continue

            neighbor = rel.neighbor_of(current)
            if neighbor is None or neighbor in on_path_set:
                continue

            on_path.append(neighbor)
            on_path_set.add(neighbor)
            path_rels.append(rel)

            if neighbor == target_id:
                await collect()
            elif len(path_rels) < max_depth:
                stack.append((neighbor, iter(await self._outgoing(neighbor, cancel_token))))
                continue

            on_path.pop()
            on_path_set.discard(neighbor)
            path_rels.pop()

        logger.debug(
            "DFS found %d paths %s -> %s (max_depth=%d)",
            len(paths),
            source_id,
            target_id,
            max_depth,
        )
        return paths

    async def _outgoing(
        self,
        entity_id: str,
        cancel_token: CancellationToken | None,
    ) -> list[Relationship]:
        return await self._repository.get_relationships(
            entity_id,
            include_outgoing=True,
            include_incoming=False,
            cancel_token=cancel_token,
        )

    async def _single_entity_path(
        self,
        entity_id: str,
        cancel_token: CancellationToken | None,
    ) -> GraphPath | None:
        entity = await self._repository.get_entity(entity_id, cancel_token)
        if entity is None:
            return None
        return GraphPath(entities=[entity])
