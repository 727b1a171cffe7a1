"""
Adapters - Storage backends implementing the GraphRepository contract.

All database access is wrapped here to isolate domains from driver changes.
"""

from .memory import InMemoryGraphRepository
from .neo4j import Neo4jClient, Neo4jGraphRepository

__all__ = [
    "InMemoryGraphRepository",
    "Neo4jClient",
    "Neo4jGraphRepository",
]
