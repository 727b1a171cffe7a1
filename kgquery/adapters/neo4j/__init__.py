"""
Neo4j adapter - Client and graph repository.
"""

from .client import Neo4jClient
from .repository import Neo4jGraphRepository

__all__ = ["Neo4jClient", "Neo4jGraphRepository"]
