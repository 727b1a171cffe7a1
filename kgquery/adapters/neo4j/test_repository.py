"""Tests for the Neo4j adapter (driver mocked)."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from neo4j.exceptions import ServiceUnavailable, SessionExpired

from kgquery.config.errors import ErrorCode, OperationCancelledError, RepositoryError
from kgquery.domains.graph import CancellationToken, GraphQuery, GraphRepository

from .client import Neo4jClient
from .repository import Neo4jGraphRepository


class FakeNeo4jDateTime:
    """Stands in for neo4j.time.DateTime."""

    def __init__(self, value: datetime) -> None:
        self.value = value

    def to_native(self) -> datetime:
        return self.value


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock(spec=Neo4jClient)


@pytest.fixture
def repo(client: AsyncMock) -> Neo4jGraphRepository:
    return Neo4jGraphRepository(client)


def entity_row(entity_id: str, entity_type: str = "Person", **props) -> dict:
    return {"props": {"id": entity_id, **props}, "labels": ["Entity", entity_type]}


def test_satisfies_contract(repo: Neo4jGraphRepository) -> None:
    assert isinstance(repo, GraphRepository)


# --- WHERE clause ---


def test_where_clause_empty() -> None:
    where, params = Neo4jGraphRepository.build_where_clause(GraphQuery())
    assert where == ""
    assert params == {}


def test_where_clause_parameterizes_everything() -> None:
    """Keys and values never appear in the Cypher text."""
    where, params = Neo4jGraphRepository.build_where_clause(
        GraphQuery(entity_type="Person", property_filters={"name": "Alice", "age": 30})
    )

    assert where == "WHERE $entity_type IN labels(n) AND n[$key0] = $value0 AND n[$key1] = $value1"
    assert params == {
        "entity_type": "Person",
        "key0": "age",
        "value0": 30,
        "key1": "name",
        "value1": "Alice",
    }
    assert "Alice" not in where


def test_where_clause_wildcard_becomes_anchored_regex() -> None:
    where, params = Neo4jGraphRepository.build_where_clause(
        GraphQuery(property_filters={"email": "*.smith@example.com"})
    )

    assert where == "WHERE n[$key0] =~ $value0"
    assert params["value0"] == r"^.*\.smith@example\.com$"


# --- Reads ---


async def test_get_entity(repo: Neo4jGraphRepository, client: AsyncMock) -> None:
    created = datetime(2024, 1, 2, tzinfo=timezone.utc)
    client.run_query.return_value = [
        entity_row("alice", name="Alice", created_at=FakeNeo4jDateTime(created))
    ]

    entity = await repo.get_entity("alice")

    assert entity is not None
    assert entity.type == "Person"
    assert entity.properties == {"name": "Alice"}
    assert entity.created_at == created
    assert client.run_query.await_args.args[1] == {"id": "alice"}


async def test_get_entity_missing(repo: Neo4jGraphRepository, client: AsyncMock) -> None:
    client.run_query.return_value = []
    assert await repo.get_entity("ghost") is None


async def test_get_entity_cancelled(repo: Neo4jGraphRepository, client: AsyncMock) -> None:
    token = CancellationToken()
    token.cancel()

    with pytest.raises(OperationCancelledError):
        await repo.get_entity("alice", cancel_token=token)
    client.run_query.assert_not_awaited()


async def test_get_relationships(repo: Neo4jGraphRepository, client: AsyncMock) -> None:
    client.run_query.return_value = [
        {
            "props": {"id": "r1", "weight": 2.5, "directed": False, "since": 2020},
            "type": "KNOWS",
            "source_id": "alice",
            "target_id": "bob",
        }
    ]

    rels = await repo.get_relationships("alice", include_incoming=False)

    assert len(rels) == 1
    assert rels[0].weight == 2.5
    assert rels[0].directed is False
    assert rels[0].properties == {"since": 2020}
    assert client.run_query.await_args.args[1] == {
        "id": "alice",
        "include_outgoing": True,
        "include_incoming": False,
    }


async def test_get_relationships_no_direction(repo: Neo4jGraphRepository, client: AsyncMock) -> None:
    assert await repo.get_relationships("alice", include_outgoing=False, include_incoming=False) == []
    client.run_query.assert_not_awaited()


async def test_execute_query(repo: Neo4jGraphRepository, client: AsyncMock) -> None:
    """Count, page, then relationships among the page."""
    client.run_query.side_effect = [
        [{"total": 7}],
        [entity_row("alice", name="Alice"), entity_row("bob", name="Bob")],
        [
            {
                "props": {"id": "r1"},
                "type": "KNOWS",
                "source_id": "alice",
                "target_id": "bob",
            }
        ],
    ]

    result = await repo.execute_query(
        GraphQuery(entity_type="Person", property_filters={"city": "Oslo"}, page_size=2, skip=4)
    )

    assert result.total_count == 7
    assert [e.id for e in result.entities] == ["alice", "bob"]
    assert [r.id for r in result.relationships] == ["r1"]

    count_call, page_call, rel_call = client.run_query.await_args_list
    assert "count(n)" in count_call.args[0]
    assert "skip" not in count_call.args[1]
    assert "SKIP $skip LIMIT $limit" in page_call.args[0]
    assert page_call.args[1]["skip"] == 4
    assert page_call.args[1]["limit"] == 2
    assert rel_call.args[1] == {"ids": ["alice", "bob"]}


async def test_execute_query_unpaged(repo: Neo4jGraphRepository, client: AsyncMock) -> None:
    client.run_query.side_effect = [[{"total": 0}], []]

    result = await repo.execute_query(GraphQuery(page_size=0))

    assert result.entities == []
    assert client.run_query.await_count == 2
    page_call = client.run_query.await_args_list[1]
    assert "LIMIT" not in page_call.args[0]


# --- Client ---


async def test_client_requires_connection() -> None:
    client = Neo4jClient()

    with pytest.raises(RepositoryError):
        await client.run_query("RETURN 1")


async def test_client_connect_unavailable() -> None:
    driver = MagicMock()
    driver.verify_connectivity = AsyncMock(side_effect=ServiceUnavailable("down"))
    driver.close = AsyncMock()

    with patch("kgquery.adapters.neo4j.client.AsyncGraphDatabase") as graph_db:
        graph_db.driver.return_value = driver
        client = Neo4jClient("bolt://db:7687")

        with pytest.raises(RepositoryError) as exc_info:
            await client.connect()

    assert exc_info.value.code == ErrorCode.REPOSITORY_UNAVAILABLE
    driver.close.assert_awaited_once()


def connected_client(session: AsyncMock) -> Neo4jClient:
    driver = MagicMock()
    driver.session.return_value.__aenter__.return_value = session
    driver.session.return_value.__aexit__.return_value = False
    client = Neo4jClient(database="graph")
    client._driver = driver
    return client


async def test_client_run_query() -> None:
    result = AsyncMock()
    result.data.return_value = [{"id": "alice"}]
    session = AsyncMock()
    session.run.return_value = result
    client = connected_client(session)

    rows = await client.run_query("MATCH (n) RETURN n.id AS id", {"x": 1})

    assert rows == [{"id": "alice"}]
    session.run.assert_awaited_once_with("MATCH (n) RETURN n.id AS id", {"x": 1})


async def test_client_session_expired() -> None:
    session = AsyncMock()
    session.run.side_effect = SessionExpired("gone")
    client = connected_client(session)

    with pytest.raises(RepositoryError):
        await client.run_query("RETURN 1")
