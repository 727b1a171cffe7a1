"""
In-Memory Graph Repository - NetworkX-backed implementation of GraphRepository.

Used as the reference backend for tests and small embedded graphs.
"""

from __future__ import annotations

import fnmatch
import logging
import time
from typing import Any

import networkx as nx

from kgquery.config.errors import InvalidArgumentError
from kgquery.domains.graph import (
    CancellationToken,
    Entity,
    GraphQuery,
    GraphQueryResult,
    GraphStats,
    Relationship,
)

logger = logging.getLogger(__name__)

__all__ = ["InMemoryGraphRepository"]


class InMemoryGraphRepository:
    """
    Graph repository holding entities and relationships in a NetworkX MultiDiGraph.

    Relationships are returned in insertion order. Undirected relationships
    count as outgoing from both endpoints.

    Example:
        >>> repo = InMemoryGraphRepository()
        >>> await repo.add_entity(Entity(id="alice", type="Person"))
        >>> await repo.add_entity(Entity(id="bob", type="Person"))
        >>> await repo.add_relationship(
        ...     Relationship(id="r1", type="KNOWS", source_id="alice", target_id="bob")
        ... )
    """

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()
        self._entities: dict[str, Entity] = {}
        self._relationships: dict[str, Relationship] = {}
        self._seq = 0

    async def add_entity(self, entity: Entity) -> str:
        """Add (or replace) an entity."""
        self._graph.add_node(entity.id, entity_type=entity.type)
        self._entities[entity.id] = entity
        logger.debug("Added entity: %s (%s)", entity.id, entity.type)
        return entity.id

    async def add_relationship(self, relationship: Relationship) -> str:
        """Add a relationship. Both endpoints must already exist."""
        for endpoint in (relationship.source_id, relationship.target_id):
            if endpoint not in self._entities:
                raise InvalidArgumentError(
                    "relationship",
                    f"Relationship {relationship.id} references unknown entity {endpoint}",
                )

        previous = self._relationships.get(relationship.id)
        if previous is not None:
            self._graph.remove_edge(previous.source_id, previous.target_id, key=previous.id)

        self._seq += 1
        self._graph.add_edge(
            relationship.source_id,
            relationship.target_id,
            key=relationship.id,
            seq=self._seq,
            type=relationship.type,
            weight=relationship.weight,
        )
        self._relationships[relationship.id] = relationship

        logger.debug(
            "Added relationship: %s -[%s]-> %s",
            relationship.source_id,
            relationship.type,
            relationship.target_id,
        )
        return relationship.id

    async def get_entity(
        self,
        entity_id: str,
        cancel_token: CancellationToken | None = None,
    ) -> Entity | None:
        """Get an entity by ID."""
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        return self._entities.get(entity_id)

    async def get_relationships(
        self,
        entity_id: str,
        include_outgoing: bool = True,
        include_incoming: bool = True,
        cancel_token: CancellationToken | None = None,
    ) -> list[Relationship]:
        """
        Get relationships touching an entity.

        Args:
            entity_id: Entity ID
            include_outgoing: Relationships leaving the entity (plus undirected ones)
            include_incoming: Relationships entering the entity (plus undirected ones)
            cancel_token: Optional cancellation signal

        Returns:
            Relationships in insertion order, without duplicates
        """
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        if entity_id not in self._graph:
            return []

        edges: list[tuple[int, str]] = []
        for _, _, key, data in self._graph.out_edges(entity_id, keys=True, data=True):
            rel = self._relationships[key]
            if include_outgoing or (include_incoming and not rel.directed):
                edges.append((data["seq"], key))
        for _, _, key, data in self._graph.in_edges(entity_id, keys=True, data=True):
            rel = self._relationships[key]
            if include_incoming or (include_outgoing and not rel.directed):
                edges.append((data["seq"], key))

        seen: set[str] = set()
        result: list[Relationship] = []
        for _, key in sorted(edges):
            if key not in seen:
                seen.add(key)
                result.append(self._relationships[key])
        return result

    async def execute_query(
        self,
        query: GraphQuery,
        cancel_token: CancellationToken | None = None,
    ) -> GraphQueryResult:
        """
        Scan entities matching the query's type and property filters.

        String filter values containing ``*`` match as shell-style wildcards;
        everything else matches by equality.
        """
        start = time.perf_counter()
        token = cancel_token if cancel_token is not None else query.cancel_token
        if token is not None:
            token.raise_if_cancelled()

        matches = [
            entity
            for entity in self._entities.values()
            if (query.entity_type is None or entity.type == query.entity_type)
            and all(
                self._matches(entity.properties.get(key, _MISSING), expected)
                for key, expected in query.property_filters.items()
            )
        ]

        total = len(matches)
        page = matches[query.skip :]
        if query.page_size > 0:
            page = page[: query.page_size]

        page_ids = {e.id for e in page}
        relationships = [
            rel
            for rel in self._relationships.values()
            if rel.source_id in page_ids and rel.target_id in page_ids
        ]

        return GraphQueryResult(
            entities=page,
            relationships=relationships,
            total_count=total,
            execution_time=time.perf_counter() - start,
        )

    async def get_stats(self) -> GraphStats:
        """Get graph statistics."""
        entities_by_type: dict[str, int] = {}
        relationships_by_type: dict[str, int] = {}

        for entity in self._entities.values():
            entities_by_type[entity.type] = entities_by_type.get(entity.type, 0) + 1

        for _, _, data in self._graph.edges(data=True):
            type_name = data.get("type", "unknown")
            relationships_by_type[type_name] = relationships_by_type.get(type_name, 0) + 1

        return GraphStats(
            total_entities=len(self._entities),
            total_relationships=self._graph.number_of_edges(),
            entities_by_type=entities_by_type,
            relationships_by_type=relationships_by_type,
        )

    @staticmethod
    def _matches(actual: Any, expected: Any) -> bool:
        if actual is _MISSING:
            return False
        if isinstance(expected, str) and "*" in expected and isinstance(actual, str):
            return fnmatch.fnmatchcase(actual, expected)
        if isinstance(expected, bool) or isinstance(actual, bool):
            return type(expected) is type(actual) and expected == actual
        return actual == expected


_MISSING = object()
