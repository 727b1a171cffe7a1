"""Tests for the query engine."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from kgquery.config.errors import (
    ErrorCode,
    InvalidArgumentError,
    OperationCancelledError,
    QueryTimeoutError,
    RepositoryError,
)
from kgquery.domains.graph import CancellationToken, Entity, GraphQuery, GraphQueryResult

from .engine import GraphQueryEngine
from .optimizer import CostBasedOptimizer


class SlowRepository:
    """Repository whose queries take ``delay`` seconds."""

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self.finished = False

    async def get_entity(self, entity_id, cancel_token=None):
        return None

    async def get_relationships(self, entity_id, include_outgoing=True, include_incoming=True, cancel_token=None):
        return []

    async def execute_query(self, query, cancel_token=None):
        await asyncio.sleep(self.delay)
        self.finished = True
        return GraphQueryResult(total_count=1)


@pytest.fixture
def repository() -> AsyncMock:
    repo = AsyncMock()
    repo.execute_query.return_value = GraphQueryResult(
        entities=[Entity(id="p1", type="Person")],
        total_count=1,
    )
    return repo


def test_requires_repository() -> None:
    with pytest.raises(InvalidArgumentError):
        GraphQueryEngine(None)  # type: ignore[arg-type]


async def test_rejects_none_query(repository: AsyncMock) -> None:
    engine = GraphQueryEngine(repository)

    with pytest.raises(InvalidArgumentError) as exc_info:
        await engine.execute_query(None)  # type: ignore[arg-type]

    assert exc_info.value.param_name == "query"
    repository.execute_query.assert_not_awaited()


async def test_delegates_to_repository(repository: AsyncMock) -> None:
    """The repository result comes back with timing filled in."""
    engine = GraphQueryEngine(repository)
    query = GraphQuery(entity_type="Person")

    result = await engine.execute_query(query)

    assert [e.id for e in result.entities] == ["p1"]
    assert result.total_count == 1
    assert result.from_cache is False
    assert result.execution_time > 0
    assert result.query_plan is None


async def test_keeps_repository_execution_time(repository: AsyncMock) -> None:
    repository.execute_query.return_value = GraphQueryResult(execution_time=1.25)
    engine = GraphQueryEngine(repository)

    result = await engine.execute_query(GraphQuery())

    assert result.execution_time == 1.25


async def test_attaches_plan_when_optimizer_given(repository: AsyncMock) -> None:
    engine = GraphQueryEngine(repository, optimizer=CostBasedOptimizer())

    result = await engine.execute_query(GraphQuery(entity_type="Person"))

    assert result.query_plan is not None
    assert "ScanByEntityType" in result.query_plan


async def test_passes_token_unchanged(repository: AsyncMock) -> None:
    """The caller's token is handed to the repository as-is."""
    engine = GraphQueryEngine(repository)
    query = GraphQuery(entity_type="Person")
    token = CancellationToken()

    await engine.execute_query(query, token)

    repository.execute_query.assert_awaited_once_with(query, token)


async def test_uses_query_token_by_default(repository: AsyncMock) -> None:
    engine = GraphQueryEngine(repository)
    token = CancellationToken()
    query = GraphQuery(cancel_token=token)

    await engine.execute_query(query)

    repository.execute_query.assert_awaited_once_with(query, token)


async def test_cancelled_before_call(repository: AsyncMock) -> None:
    engine = GraphQueryEngine(repository)
    token = CancellationToken()
    token.cancel()

    with pytest.raises(OperationCancelledError):
        await engine.execute_query(GraphQuery(), token)

    repository.execute_query.assert_not_awaited()


async def test_timeout_raises_query_timeout() -> None:
    """A repository slower than query.timeout is abandoned."""
    repo = SlowRepository(delay=5.0)
    engine = GraphQueryEngine(repo)

    with pytest.raises(QueryTimeoutError) as exc_info:
        await engine.execute_query(GraphQuery(timeout=0.05))

    assert exc_info.value.code == ErrorCode.QUERY_TIMEOUT
    assert repo.finished is False


async def test_cancel_during_call() -> None:
    """Cancelling mid-call raises OperationCancelledError, not a timeout."""
    repo = SlowRepository(delay=5.0)
    engine = GraphQueryEngine(repo)
    token = CancellationToken()
    asyncio.get_running_loop().call_later(0.05, token.cancel)

    with pytest.raises(OperationCancelledError) as exc_info:
        await engine.execute_query(GraphQuery(timeout=10), token)

    assert exc_info.value.code == ErrorCode.QUERY_CANCELLED
    assert repo.finished is False


async def test_fast_call_within_timeout() -> None:
    engine = GraphQueryEngine(SlowRepository(delay=0.01))

    result = await engine.execute_query(GraphQuery(timeout=5))

    assert result.total_count == 1


async def test_repository_errors_propagate(repository: AsyncMock) -> None:
    error = RepositoryError("backend down")
    repository.execute_query.side_effect = error
    engine = GraphQueryEngine(repository)

    with pytest.raises(RepositoryError) as exc_info:
        await engine.execute_query(GraphQuery())

    assert exc_info.value is error


async def test_repository_timeout_is_not_rewrapped(repository: AsyncMock) -> None:
    """A TimeoutError raised by the repository itself stays distinguishable."""
    repository.execute_query.side_effect = TimeoutError("socket timeout")
    engine = GraphQueryEngine(repository)

    with pytest.raises(TimeoutError) as exc_info:
        await engine.execute_query(GraphQuery(timeout=5))

    assert not isinstance(exc_info.value, QueryTimeoutError)
    assert str(exc_info.value) == "socket timeout"
