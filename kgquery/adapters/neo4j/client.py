"""
Neo4j Client - Graph database access.

Features:
- Async driver with connection pooling
- Parameterized Cypher execution
- Driver failures surfaced as RepositoryError
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from neo4j import AsyncDriver, AsyncGraphDatabase
from neo4j.exceptions import Neo4jError, ServiceUnavailable, SessionExpired

from kgquery.config.errors import ErrorCode, RepositoryError

if TYPE_CHECKING:
    from kgquery.config.settings import Settings

logger = logging.getLogger(__name__)

__all__ = ["Neo4jClient"]


class Neo4jClient:
    """
    Neo4j graph database client.

    Example:
        >>> client = Neo4jClient("bolt://localhost:7687", "neo4j", "password")
        >>> await client.connect()
        >>> rows = await client.run_query("MATCH (n:Entity) RETURN n.id AS id LIMIT 10")
    """

    def __init__(
        self,
        uri: str = "bolt://localhost:7687",
        username: str = "neo4j",
        password: str = "password",
        database: str = "neo4j",
    ) -> None:
        """
        Initialize Neo4j client.

        Args:
            uri: Neo4j connection URI
            username: Database username
            password: Database password
            database: Database name
        """
        self.uri = uri
        self.username = username
        self.password = password
        self.database = database
        self._driver: AsyncDriver | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Neo4jClient:
        return cls(
            uri=settings.neo4j_uri,
            username=settings.neo4j_username,
            password=settings.neo4j_password,
            database=settings.neo4j_database,
        )

    async def connect(self) -> None:
        """Establish connection to Neo4j."""
        self._driver = AsyncGraphDatabase.driver(
            self.uri,
            auth=(self.username, self.password),
        )
        try:
            await self._driver.verify_connectivity()
        except ServiceUnavailable as e:
            await self.close()
            raise RepositoryError(f"Neo4j unavailable at {self.uri}", {"uri": self.uri}) from e
        logger.info("Connected to Neo4j: %s", self.uri)

    async def close(self) -> None:
        """Close connection."""
        if self._driver:
            await self._driver.close()
            self._driver = None

    async def __aenter__(self) -> Neo4jClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def run_query(
        self,
        query: str,
        parameters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Execute a read-only Cypher query.

        Args:
            query: Cypher query string
            parameters: Query parameters

        Returns:
            List of result records as dicts
        """
        if not self._driver:
            raise RepositoryError("Not connected. Call connect() first.")

        try:
            async with self._driver.session(database=self.database) as session:
                result = await session.run(query, parameters or {})
                return await result.data()
        except (ServiceUnavailable, SessionExpired) as e:
            raise RepositoryError("Neo4j connection lost", {"uri": self.uri}) from e
        except Neo4jError as e:
            raise RepositoryError(
                f"Neo4j query failed: {e}",
                {"uri": self.uri, "neo4j_code": e.code},
                code=ErrorCode.REPOSITORY_READ_FAILED,
            ) from e
