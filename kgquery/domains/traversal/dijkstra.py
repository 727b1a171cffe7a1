"""
Dijkstra Path Finder - Weighted shortest path search.

Weights come from ``Relationship.weight``, which is validated non-negative
when a relationship is constructed.
"""

from __future__ import annotations

import heapq
import itertools
import logging

from kgquery.config.errors import InvalidArgumentError
from kgquery.domains.graph import CancellationToken, GraphPath, GraphRepository

from .paths import ParentMap, materialize_path, trace_back

logger = logging.getLogger(__name__)

__all__ = ["DijkstraPathFinder"]


class DijkstraPathFinder:
    """
    Weighted shortest path finder.

    Runs in O((V + E) log V) over the reachable subgraph and stops as soon
    as the target is settled. Among equal-weight paths the first one
    discovered wins: a relaxation only replaces a predecessor on strict
    improvement.

    Example:
        >>> finder = DijkstraPathFinder(repository)
        >>> path = await finder.find_shortest_path("A", "E")
        >>> path.total_weight
        6.0
    """

    def __init__(self, repository: GraphRepository) -> None:
        if repository is None:
            raise InvalidArgumentError("repository")
        self._repository = repository

    async def find_shortest_path(
        self,
        source_id: str,
        target_id: str,
        cancel_token: CancellationToken | None = None,
    ) -> GraphPath | None:
        """
        Find the path with the smallest total weight.

        Args:
            source_id: Source entity ID
            target_id: Target entity ID
            cancel_token: Optional cancellation signal, checked per settled node

        Returns:
            Lowest-weight path, or None if the target is unreachable
        """
        if source_id == target_id:
            entity = await self._repository.get_entity(source_id, cancel_token)
            if entity is None:
                return None
            return GraphPath(entities=[entity], total_weight=0.0)

        distances: dict[str, float] = {source_id: 0.0}
        parents: ParentMap = {}
        settled: set[str] = set()
        # (distance, insertion order, entity id); insertion order keeps pops deterministic
        counter = itertools.count()
        frontier: list[tuple[float, int, str]] = [(0.0, next(counter), source_id)]

        while frontier:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            distance, _, current = heapq.heappop(frontier)
            if current in settled:
                continue
            settled.add(current)

            if current == target_id:
                ids, relationships = trace_back(source_id, target_id, parents)
                logger.debug(
                    "Dijkstra found %s -> %s: weight %.3f over %d hops",
                    source_id,
                    target_id,
                    distance,
                    len(relationships),
                )
                return await materialize_path(
                    self._repository,
                    ids,
                    relationships,
                    total_weight=distance,
                    cancel_token=cancel_token,
                )

            relationships = await self._repository.get_relationships(
                current,
                include_outgoing=True,
                include_incoming=False,
                cancel_token=cancel_token,
            )
            for rel in relationships:
                neighbor = rel.neighbor_of(current)
                if neighbor is None or neighbor in settled:
                    continue
                candidate = distance + rel.weight
                if neighbor not in distances or candidate < distances[neighbor]:
                    distances[neighbor] = candidate
                    parents[neighbor] = (current, rel)
                    heapq.heappush(frontier, (candidate, next(counter), neighbor))

        logger.debug("Dijkstra found no path %s -> %s (%d settled)", source_id, target_id, len(settled))
        return None
