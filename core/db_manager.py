# core/db_manager.py
"""Ownership of the async Neo4j driver and one-off schema setup."""

from typing import Any

import structlog
from config import settings
from kg_constants import (
    KG_PROP_NAME,
    KG_PROP_TITLE,
    MOVIE_LABEL,
    NODE_LABELS,
    PERSON_LABEL,
    RELATIONSHIP_TYPES,
)
from neo4j import (  # type: ignore
    AsyncDriver,
    AsyncGraphDatabase,
    AsyncManagedTransaction,
)
from neo4j.exceptions import ServiceUnavailable  # type: ignore


Statement = tuple[str, dict[str, Any]]


class Neo4jManagerSingleton:
    """Process-wide owner of the async Neo4j driver.

    The driver holds the connection pool; sessions are opened per query by
    the callers and never shared between tasks.
    """

    _instance = None

    def __new__(cls, *args, **kwargs):
        if not cls._instance:
            cls._instance = super().__new__(cls)
            cls._instance._initialized_flag = False
        return cls._instance

    def __init__(self):
        if self._initialized_flag:
            return
        self.logger = structlog.get_logger(__name__)
        self.driver: AsyncDriver | None = None
        self._initialized_flag = True

    async def __aenter__(self) -> "Neo4jManagerSingleton":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def connect(self) -> None:
        """(Re)create the driver and check that the server is reachable."""
        if self.driver is not None:
            await self.close()

        driver = AsyncGraphDatabase.driver(
            settings.NEO4J_URI,
            auth=(settings.NEO4J_USER, settings.NEO4J_PASSWORD),
            max_transaction_retry_time=settings.NEO4J_MAX_TRANSACTION_RETRY_TIME,
            connection_acquisition_timeout=settings.NEO4J_CONNECTION_ACQUISITION_TIMEOUT,
        )
        try:
            await driver.verify_connectivity()
        except ServiceUnavailable as exc:
            self.logger.critical(
                "Neo4j is unreachable", uri=settings.NEO4J_URI, error=str(exc)
            )
            await driver.close()
            raise
        self.driver = driver
        self.logger.info("Connected to Neo4j", uri=settings.NEO4J_URI)

    async def close(self) -> None:
        if self.driver is None:
            return
        driver, self.driver = self.driver, None
        try:
            await driver.close()
        except Exception as exc:  # pragma: no cover - driver teardown
            self.logger.warning("Error while closing Neo4j driver", error=str(exc))
        else:
            self.logger.info("Neo4j driver closed")

    async def get_driver(self) -> AsyncDriver:
        """Return the connected driver, connecting on first use."""
        if self.driver is None:
            await self.connect()
        if self.driver is None:
            raise ConnectionError("Neo4j driver not initialized or connection failed.")
        return self.driver

    @staticmethod
    async def _data_tx(
        tx: AsyncManagedTransaction, query: str, parameters: dict[str, Any] | None
    ) -> list[dict[str, Any]]:
        cursor = await tx.run(query, parameters)
        return await cursor.data()

    async def execute_write_query(
        self, query: str, parameters: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        driver = await self.get_driver()
        async with driver.session(database=settings.NEO4J_DATABASE) as session:
            return await session.execute_write(self._data_tx, query, parameters)

    async def execute_cypher_batch(self, statements: list[Statement]) -> None:
        """Run ``statements`` in one explicit transaction, all or nothing."""
        if not statements:
            return
        driver = await self.get_driver()
        async with driver.session(database=settings.NEO4J_DATABASE) as session:
            tx = await session.begin_transaction()
            try:
                for query, params in statements:
                    await tx.run(query, params)
                await tx.commit()
            except Exception:
                if not tx.closed():
                    await tx.rollback()
                raise
        self.logger.debug("Executed statement batch", count=len(statements))

    async def _run_schema_operations(self, queries: list[str], description: str) -> None:
        try:
            await self.execute_cypher_batch([(q, {}) for q in queries])
        except Exception as exc:
            self.logger.warning(
                "Schema batch failed; applying statements one at a time",
                kind=description,
                error=str(exc),
            )
            for query in queries:
                try:
                    await self.execute_write_query(query)
                except Exception as single_exc:
                    self.logger.warning(
                        "Schema statement failed",
                        kind=description,
                        query=query,
                        error=str(single_exc),
                    )
        else:
            self.logger.info("Applied schema batch", kind=description, count=len(queries))

    async def _create_constraints(self) -> None:
        # Person.name uniqueness keeps concurrent person merges from
        # creating duplicates.
        queries = [
            "CREATE CONSTRAINT person_name_unique IF NOT EXISTS "
            f"FOR (p:{PERSON_LABEL}) REQUIRE p.{KG_PROP_NAME} IS UNIQUE",
            "CREATE CONSTRAINT movie_title_unique IF NOT EXISTS "
            f"FOR (m:{MOVIE_LABEL}) REQUIRE m.{KG_PROP_TITLE} IS UNIQUE",
        ]
        await self._run_schema_operations(queries, "constraint")

    async def create_db_schema(self) -> None:
        """Create the constraints and schema tokens the movie queries rely on.

        Constraints use ``IF NOT EXISTS``. Relationship types and labels are
        created and removed once so that queries naming a still-unused type
        do not produce "unknown relationship type" notifications.
        """
        await self._create_constraints()

        token_queries = [
            f"CREATE (a:__RelTypePlaceholder)-[:{rel_type}]->"
            f"(b:__RelTypePlaceholder) WITH a, b DETACH DELETE a, b"
            for rel_type in sorted(RELATIONSHIP_TYPES)
        ]
        token_queries += [
            f"CREATE (a:`{label}`) WITH a DELETE a" for label in sorted(NODE_LABELS)
        ]
        await self._run_schema_operations(token_queries, "schema token")


neo4j_manager = Neo4jManagerSingleton()
