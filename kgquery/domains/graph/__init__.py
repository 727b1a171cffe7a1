"""
Graph Domain - Core data model and the storage contract.

This domain handles:
- Entities and relationships (read-only snapshots)
- Attribute queries and their results
- Paths produced by traversal
- Cooperative cancellation
"""

from .cancellation import CancellationToken
from .contracts import GraphRepository
from .models import (
    Entity,
    GraphPath,
    GraphQuery,
    GraphQueryResult,
    GraphStats,
    PropertyValue,
    Relationship,
)

__all__ = [
    # Contracts
    "GraphRepository",
    # Models
    "PropertyValue",
    "Entity",
    "Relationship",
    "GraphQuery",
    "GraphQueryResult",
    "GraphPath",
    "GraphStats",
    "CancellationToken",
]
