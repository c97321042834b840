from unittest.mock import AsyncMock, MagicMock

import pytest
from core import db_manager
from core.db_manager import Neo4jManagerSingleton


def test_manager_is_a_singleton():
    assert Neo4jManagerSingleton() is db_manager.neo4j_manager


@pytest.mark.asyncio
async def test_create_db_schema_adds_uniqueness_constraints(monkeypatch):
    manager = Neo4jManagerSingleton()
    batches: list[list[tuple[str, dict]]] = []

    async def fake_batch(statements):
        batches.append(statements)

    monkeypatch.setattr(manager, "execute_cypher_batch", fake_batch)
    await manager.create_db_schema()

    statements = [query for batch in batches for query, _ in batch]
    assert any(
        "FOR (p:Person) REQUIRE p.name IS UNIQUE" in q for q in statements
    )
    assert any("FOR (m:Movie) REQUIRE m.title IS UNIQUE" in q for q in statements)
    assert any("[:ACTED_IN]" in q for q in statements)


@pytest.mark.asyncio
async def test_schema_batch_failure_falls_back_to_single_statements(monkeypatch):
    manager = Neo4jManagerSingleton()
    monkeypatch.setattr(
        manager, "execute_cypher_batch", AsyncMock(side_effect=RuntimeError("boom"))
    )
    single = AsyncMock(return_value=[])
    monkeypatch.setattr(manager, "execute_write_query", single)

    await manager._create_constraints()
    assert single.await_count == 2


@pytest.mark.asyncio
async def test_get_driver_connects_once(monkeypatch):
    manager = Neo4jManagerSingleton()
    driver = MagicMock()
    driver.verify_connectivity = AsyncMock()
    driver.close = AsyncMock()
    factory = MagicMock(return_value=driver)
    monkeypatch.setattr(db_manager.AsyncGraphDatabase, "driver", factory)
    monkeypatch.setattr(manager, "driver", None)

    assert await manager.get_driver() is driver
    assert await manager.get_driver() is driver
    factory.assert_called_once()
    kwargs = factory.call_args.kwargs
    assert "max_transaction_retry_time" in kwargs
    assert "connection_acquisition_timeout" in kwargs

    await manager.close()
    assert manager.driver is None
