"""
Path materialization shared by the traversal algorithms.
"""

from __future__ import annotations

import logging

from kgquery.domains.graph import (
    CancellationToken,
    Entity,
    GraphPath,
    GraphRepository,
    Relationship,
)

logger = logging.getLogger(__name__)

# child id -> (parent id, relationship followed from parent to child)
ParentMap = dict[str, tuple[str, Relationship]]


def trace_back(
    source_id: str,
    target_id: str,
    parents: ParentMap,
) -> tuple[list[str], list[Relationship]]:
    """Walk predecessor links from target to source; returns both lists source-first."""
    ids = [target_id]
    relationships: list[Relationship] = []
    current = target_id
    while current != source_id:
        parent, rel = parents[current]
        relationships.append(rel)
        ids.append(parent)
        current = parent
    ids.reverse()
    relationships.reverse()
    return ids, relationships


async def materialize_path(
    repository: GraphRepository,
    entity_ids: list[str],
    relationships: list[Relationship],
    total_weight: float = 0.0,
    cancel_token: CancellationToken | None = None,
    entity_cache: dict[str, Entity | None] | None = None,
) -> GraphPath | None:
    """
    Resolve entity ids into a GraphPath.

    Returns None when any entity no longer resolves, so a returned path
    always satisfies ``hops == len(entities) - 1``.
    """
    cache = entity_cache if entity_cache is not None else {}
    entities: list[Entity] = []
    for entity_id in entity_ids:
        if entity_id not in cache:
            cache[entity_id] = await repository.get_entity(entity_id, cancel_token)
        entity = cache[entity_id]
        if entity is None:
            logger.warning("Dangling entity %s on path; dropping path", entity_id)
            return None
        entities.append(entity)

    return GraphPath(
        entities=entities,
        relationships=list(relationships),
        total_weight=total_weight,
    )
