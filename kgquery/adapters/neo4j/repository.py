"""
Neo4j Graph Repository - GraphRepository backed by a Neo4j database.

Storage layout:
- every entity is a node labelled ``Entity`` plus its type label, with the
  property bag stored as node properties next to ``id`` and ``created_at``
- every relationship is an edge typed by its relationship type, carrying
  ``id``, ``weight``, ``directed`` and ``created_at`` plus its property bag

Neo4j properties cannot hold nested maps, so property bags read back from
this backend are flat.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any

from kgquery.domains.graph import (
    CancellationToken,
    Entity,
    GraphQuery,
    GraphQueryResult,
    Relationship,
)

from .client import Neo4jClient

logger = logging.getLogger(__name__)

__all__ = ["Neo4jGraphRepository"]

ENTITY_LABEL = "Entity"
_ENTITY_RESERVED = ("id", "created_at")
_RELATIONSHIP_RESERVED = ("id", "weight", "directed", "created_at")

_GET_ENTITY = """
    MATCH (n:Entity {id: $id})
    RETURN properties(n) AS props, labels(n) AS labels
    LIMIT 1
"""

_GET_RELATIONSHIPS = """
    MATCH (n:Entity {id: $id})-[r]-(:Entity)
    WITH DISTINCT r
    WITH r,
         startNode(r).id = $id AS outgoing,
         endNode(r).id = $id AS incoming,
         NOT coalesce(r.directed, true) AS undirected
    WHERE ($include_outgoing AND (outgoing OR undirected))
       OR ($include_incoming AND (incoming OR undirected))
    RETURN properties(r) AS props, type(r) AS type,
           startNode(r).id AS source_id, endNode(r).id AS target_id
    ORDER BY r.created_at, r.id
"""

_RELATIONSHIPS_AMONG = """
    MATCH (a:Entity)-[r]->(b:Entity)
    WHERE a.id IN $ids AND b.id IN $ids
    RETURN properties(r) AS props, type(r) AS type,
           a.id AS source_id, b.id AS target_id
    ORDER BY r.created_at, r.id
"""


class Neo4jGraphRepository:
    """
    Read-only graph repository over Neo4j.

    Example:
        >>> client = Neo4jClient.from_settings(get_settings())
        >>> await client.connect()
        >>> repo = Neo4jGraphRepository(client)
        >>> alice = await repo.get_entity("alice")
    """

    def __init__(self, client: Neo4jClient) -> None:
        self._client = client

    async def get_entity(
        self,
        entity_id: str,
        cancel_token: CancellationToken | None = None,
    ) -> Entity | None:
        """Get an entity by ID."""
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        rows = await self._client.run_query(_GET_ENTITY, {"id": entity_id})
        return self._to_entity(rows[0]) if rows else None

    async def get_relationships(
        self,
        entity_id: str,
        include_outgoing: bool = True,
        include_incoming: bool = True,
        cancel_token: CancellationToken | None = None,
    ) -> list[Relationship]:
        """Get relationships touching an entity, oldest first."""
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        if not (include_outgoing or include_incoming):
            return []
        rows = await self._client.run_query(
            _GET_RELATIONSHIPS,
            {
                "id": entity_id,
                "include_outgoing": include_outgoing,
                "include_incoming": include_incoming,
            },
        )
        return [self._to_relationship(row) for row in rows]

    async def execute_query(
        self,
        query: GraphQuery,
        cancel_token: CancellationToken | None = None,
    ) -> GraphQueryResult:
        """Run a filtered, paginated entity scan in Cypher."""
        start = time.perf_counter()
        token = cancel_token if cancel_token is not None else query.cancel_token
        if token is not None:
            token.raise_if_cancelled()

        where, params = self.build_where_clause(query)

        count_rows = await self._client.run_query(
            f"MATCH (n:Entity) {where} RETURN count(n) AS total",
            params,
        )
        total = count_rows[0]["total"] if count_rows else 0

        page_cypher = (
            f"MATCH (n:Entity) {where} "
            "RETURN properties(n) AS props, labels(n) AS labels "
            "ORDER BY n.id SKIP $skip"
        )
        page_params = {**params, "skip": query.skip}
        if query.page_size > 0:
            page_cypher += " LIMIT $limit"
            page_params["limit"] = query.page_size

        if token is not None:
            token.raise_if_cancelled()
        entity_rows = await self._client.run_query(page_cypher, page_params)
        entities = [self._to_entity(row) for row in entity_rows]

        relationships: list[Relationship] = []
        if entities:
            rel_rows = await self._client.run_query(
                _RELATIONSHIPS_AMONG,
                {"ids": [e.id for e in entities]},
            )
            relationships = [self._to_relationship(row) for row in rel_rows]

        elapsed = time.perf_counter() - start
        logger.debug(
            "Neo4j query matched %d entities (%d returned) in %.3fs",
            total,
            len(entities),
            elapsed,
        )
        return GraphQueryResult(
            entities=entities,
            relationships=relationships,
            total_count=total,
            execution_time=elapsed,
        )

    @staticmethod
    def build_where_clause(query: GraphQuery) -> tuple[str, dict[str, Any]]:
        """
        Build a parameterized WHERE clause for a query.

        Property keys and values are always passed as parameters; wildcard
        values (containing ``*``) become anchored regular expressions.
        """
        conditions: list[str] = []
        params: dict[str, Any] = {}

        if query.entity_type:
            conditions.append("$entity_type IN labels(n)")
            params["entity_type"] = query.entity_type

        for i, (key, value) in enumerate(sorted(query.property_filters.items())):
            params[f"key{i}"] = key
            if isinstance(value, str) and "*" in value:
                pattern = ".*".join(re.escape(part) for part in value.split("*"))
                conditions.append(f"n[$key{i}] =~ $value{i}")
                params[f"value{i}"] = f"^{pattern}$"
            else:
                conditions.append(f"n[$key{i}] = $value{i}")
                params[f"value{i}"] = value

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        return where, params

    @staticmethod
    def _to_entity(row: dict[str, Any]) -> Entity:
        props = dict(row["props"])
        entity_type = next((label for label in row["labels"] if label != ENTITY_LABEL), ENTITY_LABEL)
        return Entity(
            id=props["id"],
            type=entity_type,
            properties={k: v for k, v in props.items() if k not in _ENTITY_RESERVED},
            **_created_at(props),
        )

    @staticmethod
    def _to_relationship(row: dict[str, Any]) -> Relationship:
        props = dict(row["props"])
        return Relationship(
            id=props["id"],
            type=row["type"],
            source_id=row["source_id"],
            target_id=row["target_id"],
            properties={k: v for k, v in props.items() if k not in _RELATIONSHIP_RESERVED},
            weight=props.get("weight", 1.0),
            directed=props.get("directed", True),
            **_created_at(props),
        )


def _created_at(props: dict[str, Any]) -> dict[str, Any]:
    value = props.get("created_at")
    if value is None:
        return {}
    # neo4j.time.DateTime -> datetime
    if hasattr(value, "to_native"):
        value = value.to_native()
    return {"created_at": value}
