"""
Graph Contracts - Interface of the storage layer consumed by the query engine.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .cancellation import CancellationToken
from .models import Entity, GraphQuery, GraphQueryResult, Relationship


@runtime_checkable
class GraphRepository(Protocol):
    """Contract for read access to graph storage."""

    async def get_entity(
        self,
        entity_id: str,
        cancel_token: CancellationToken | None = None,
    ) -> Entity | None:
        """Get an entity by ID."""
        ...

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
            include_outgoing: Include relationships where the entity is the source
            include_incoming: Include relationships where the entity is the target
            cancel_token: Optional cancellation signal

        Returns:
            Relationships in storage order
        """
        ...

    async def execute_query(
        self,
        query: GraphQuery,
        cancel_token: CancellationToken | None = None,
    ) -> GraphQueryResult:
        """Run a filtered, paginated entity scan."""
        ...
