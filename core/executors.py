# core/executors.py
"""Ways of running a built query and draining its records.

Every executor returns the records of one query as a list of plain
``dict`` rows, in the order the database produced them. Reads are routed to
read transactions and writes to write transactions; the driver retries the
transaction on transient failures, so queries passed to :meth:`write` must be
safe to run twice (the movie writes use ``MERGE``).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol

import structlog
from config import settings
from neo4j import AsyncManagedTransaction, RoutingControl  # type: ignore
from neo4j.exceptions import DriverError, Neo4jError  # type: ignore

from core.db_manager import Neo4jManagerSingleton, neo4j_manager
from core.exceptions import BackendError

if TYPE_CHECKING:  # pragma: no cover - for type hints only
    from data_access.cypher_builders.fluent_cypher import CypherQuery

logger = structlog.get_logger(__name__)

RawRecord = dict[str, Any]

__all__ = [
    "QueryExecutor",
    "DriverCursorExecutor",
    "DriverExtensionsExecutor",
    "FluentQueryExecutor",
    "get_executor",
]


class QueryExecutor(Protocol):
    """Runs a query in a read or write transaction and returns its rows."""

    strategy: str

    async def read(self, query: CypherQuery) -> list[RawRecord]: ...

    async def write(self, query: CypherQuery) -> list[RawRecord]: ...


class _BaseExecutor:
    strategy = "base"

    def __init__(self, db: Neo4jManagerSingleton | None = None) -> None:
        self.db = db or neo4j_manager

    async def read(self, query: CypherQuery) -> list[RawRecord]:
        return await self._guarded("read", query, self._run_read)

    async def write(self, query: CypherQuery) -> list[RawRecord]:
        return await self._guarded("write", query, self._run_write)

    async def _guarded(
        self,
        mode: str,
        query: CypherQuery,
        run: Callable[[CypherQuery], Awaitable[list[RawRecord]]],
    ) -> list[RawRecord]:
        try:
            records = await run(query)
        except (Neo4jError, DriverError, ConnectionError) as exc:
            logger.error(
                "Query failed",
                strategy=self.strategy,
                mode=mode,
                query=query.text,
                error=str(exc),
            )
            raise BackendError(
                f"{mode} query failed using the {self.strategy} strategy: {exc}"
            ) from exc
        logger.debug(
            "Query completed",
            strategy=self.strategy,
            mode=mode,
            record_count=len(records),
        )
        return records

    async def _run_read(self, query: CypherQuery) -> list[RawRecord]:
        raise NotImplementedError

    async def _run_write(self, query: CypherQuery) -> list[RawRecord]:
        raise NotImplementedError


class _ManagedTransactionExecutor(_BaseExecutor):
    """Runs queries through session transaction functions.

    A session is opened per call and closed on exit, including when the
    calling task is cancelled.
    """

    @staticmethod
    async def _drain(
        tx: AsyncManagedTransaction, text: str, parameters: dict[str, Any]
    ) -> list[RawRecord]:
        raise NotImplementedError

    async def _run_read(self, query: CypherQuery) -> list[RawRecord]:
        driver = await self.db.get_driver()
        async with driver.session(database=settings.NEO4J_DATABASE) as session:
            return await session.execute_read(
                self._drain, query.text, query.parameters
            )

    async def _run_write(self, query: CypherQuery) -> list[RawRecord]:
        driver = await self.db.get_driver()
        async with driver.session(database=settings.NEO4J_DATABASE) as session:
            return await session.execute_write(
                self._drain, query.text, query.parameters
            )


class DriverCursorExecutor(_ManagedTransactionExecutor):
    """Iterates the result cursor record by record.

    Node values are left as driver ``Node`` objects for the mapper to read.
    """

    strategy = "driver"

    @staticmethod
    async def _drain(
        tx: AsyncManagedTransaction, text: str, parameters: dict[str, Any]
    ) -> list[RawRecord]:
        cursor = await tx.run(text, parameters)
        records: list[RawRecord] = []
        async for record in cursor:
            records.append(dict(record.items()))
        return records


class DriverExtensionsExecutor(_ManagedTransactionExecutor):
    """Drains the cursor with ``Result.data()``, turning nodes into property maps."""

    strategy = "extensions"

    @staticmethod
    async def _drain(
        tx: AsyncManagedTransaction, text: str, parameters: dict[str, Any]
    ) -> list[RawRecord]:
        cursor = await tx.run(text, parameters)
        return await cursor.data()


class FluentQueryExecutor(_BaseExecutor):
    """Uses ``Driver.execute_query``, which manages the session and retries itself."""

    strategy = "fluent"

    async def _execute(
        self, query: CypherQuery, routing: RoutingControl
    ) -> list[RawRecord]:
        driver = await self.db.get_driver()
        result = await driver.execute_query(
            query.text,
            query.parameters,
            routing_=routing,
            database_=settings.NEO4J_DATABASE,
        )
        return [record.data() for record in result.records]

    async def _run_read(self, query: CypherQuery) -> list[RawRecord]:
        return await self._execute(query, RoutingControl.READ)

    async def _run_write(self, query: CypherQuery) -> list[RawRecord]:
        return await self._execute(query, RoutingControl.WRITE)


_EXECUTORS: dict[str, type[_BaseExecutor]] = {
    DriverCursorExecutor.strategy: DriverCursorExecutor,
    DriverExtensionsExecutor.strategy: DriverExtensionsExecutor,
    FluentQueryExecutor.strategy: FluentQueryExecutor,
}


def get_executor(
    strategy: str | None = None, db: Neo4jManagerSingleton | None = None
) -> QueryExecutor:
    """Return an executor for ``strategy`` (defaults to ``settings.ACCESS_STRATEGY``)."""
    name = (strategy or settings.ACCESS_STRATEGY).strip().lower()
    try:
        executor_cls = _EXECUTORS[name]
    except KeyError:
        raise ValueError(
            f"Unknown access strategy {name!r}; expected one of {sorted(_EXECUTORS)}"
        ) from None
    return executor_cls(db)
