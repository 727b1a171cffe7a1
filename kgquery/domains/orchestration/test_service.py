"""Tests for the graph query service facade."""

import pytest

from kgquery.adapters.memory import InMemoryGraphRepository
from kgquery.config.errors import InvalidArgumentError
from kgquery.config.settings import Settings
from kgquery.domains.graph import Entity, GraphQuery, Relationship
from kgquery.domains.query import QueryCacheService

from .service import GraphQueryService


@pytest.fixture
async def repository() -> InMemoryGraphRepository:
    """Small road network: a->b->d costs 10, a->c->d costs 4."""
    repo = InMemoryGraphRepository()
    for node, city in (("a", "Oslo"), ("b", "Oslo"), ("c", "Bergen"), ("d", "Bergen")):
        await repo.add_entity(Entity(id=node, type="Town", properties={"name": node.upper(), "city": city}))
    for rel_id, source, target, weight in (
        ("ab", "a", "b", 1.0),
        ("bd", "b", "d", 9.0),
        ("ac", "a", "c", 2.0),
        ("cd", "c", "d", 2.0),
    ):
        await repo.add_relationship(
            Relationship(id=rel_id, type="ROAD", source_id=source, target_id=target, weight=weight)
        )
    return repo


@pytest.fixture
def service(repository: InMemoryGraphRepository) -> GraphQueryService:
    return GraphQueryService(repository, max_traversal_depth=3)


def test_requires_repository() -> None:
    with pytest.raises(InvalidArgumentError):
        GraphQueryService(None)  # type: ignore[arg-type]


async def test_execute_query_caches(service: GraphQueryService) -> None:
    """The second identical query is served from cache."""
    query = GraphQuery(entity_type="Town", property_filters={"city": "Oslo"})

    first = await service.execute_query(query)
    second = await service.execute_query(query)

    assert first.from_cache is False
    assert second.from_cache is True
    assert [e.id for e in second.entities] == ["a", "b"]
    assert first.query_plan is not None

    stats = service.cache_statistics()
    assert stats.hits == 1
    assert stats.misses == 1


async def test_clear_cache(service: GraphQueryService) -> None:
    query = GraphQuery(entity_type="Town")
    await service.execute_query(query)

    service.clear_cache()
    result = await service.execute_query(query)

    assert result.from_cache is False


async def test_rejects_none_query(service: GraphQueryService) -> None:
    with pytest.raises(InvalidArgumentError):
        await service.execute_query(None)  # type: ignore[arg-type]


async def test_explain(service: GraphQueryService) -> None:
    plan = service.explain(GraphQuery(entity_type="Town", property_filters={"id": "a"}))

    assert plan.steps[0].operation == "ScanByEntityType"
    assert plan.recommended_indexes == ["id"]


async def test_weighted_and_unweighted_paths_differ(service: GraphQueryService) -> None:
    shortest = await service.find_shortest_path("a", "d")
    fewest_hops = await service.find_unweighted_path("a", "d")

    assert shortest is not None
    assert shortest.entity_ids() == ["a", "c", "d"]
    assert shortest.total_weight == 4.0

    assert fewest_hops is not None
    assert fewest_hops.hops == 2
    assert fewest_hops.entity_ids() == ["a", "b", "d"]


async def test_find_all_paths_uses_default_depth(service: GraphQueryService) -> None:
    paths = await service.find_all_paths("a", "d")
    shallow = await service.find_all_paths("a", "d", max_depth=1)

    assert [p.entity_ids() for p in paths] == [["a", "b", "d"], ["a", "c", "d"]]
    assert shallow == []


async def test_from_settings(repository: InMemoryGraphRepository) -> None:
    settings = Settings(cache_duration_seconds=5, cache_max_entries=1, max_traversal_depth=1)
    service = GraphQueryService.from_settings(repository, settings)

    await service.execute_query(GraphQuery(entity_type="Town"))
    await service.execute_query(GraphQuery(entity_type="Road"))

    assert service.cache_statistics().size == 1
    assert await service.find_all_paths("a", "d") == []


async def test_custom_cache(repository: InMemoryGraphRepository) -> None:
    cache = QueryCacheService(cache_duration_seconds=60)
    service = GraphQueryService(repository, cache=cache)

    await service.execute_query(GraphQuery(entity_type="Town"))

    assert cache.get_cache_statistics().size == 1


async def test_build_query_uses_defaults(repository: InMemoryGraphRepository) -> None:
    settings = Settings(default_page_size=25, query_timeout_seconds=2)
    service = GraphQueryService.from_settings(repository, settings)

    query = service.build_query("Town", {"city": "Oslo"}, skip=10)
    overridden = service.build_query(page_size=0)

    assert query.entity_type == "Town"
    assert query.property_filters == {"city": "Oslo"}
    assert query.page_size == 25
    assert query.timeout == 2
    assert query.skip == 10
    assert overridden.page_size == 0
