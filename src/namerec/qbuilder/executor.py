"""Query executor - runs validated query text against a database."""

import logging
from collections.abc import Mapping
from typing import Any
from typing import Protocol
from typing import runtime_checkable

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from namerec.qbuilder.exceptions import QBExecutionError
from namerec.qbuilder.types import QueryResult

logger = logging.getLogger(__name__)


@runtime_checkable
class QueryExecutor(Protocol):
    """
    Protocol for query executors.

    Allows structural subtyping - any class with a matching `execute` can be
    used without explicit inheritance. Executors do not retry or cache.
    """

    async def execute(self, sql: str, params: Mapping[str, Any] | None = None) -> QueryResult:
        """
        Execute query text.

        Args:
            sql: Query text, optionally with ':name' bind placeholders
            params: Bind parameter values

        Returns:
            QueryResult with column names and rows

        Raises:
            QBExecutionError: If the database rejects the query
        """
        ...


class SQLAlchemyQueryExecutor:
    """Executor backed by a SQLAlchemy async engine, one connection per call."""

    def __init__(self, engine: AsyncEngine, max_rows: int | None = None) -> None:
        """
        Initialize executor.

        Args:
            engine: Async engine of the data source being queried
            max_rows: Optional cap on fetched rows (None = fetch all)
        """
        self._engine = engine
        self._max_rows = max_rows

    @property
    def engine(self) -> AsyncEngine:
        """Get the underlying engine."""
        return self._engine

    async def execute(self, sql: str, params: Mapping[str, Any] | None = None) -> QueryResult:
        """
        Execute query text and fetch the result set.

        Raises:
            QBExecutionError: If the database rejects the query
        """
        logger.debug(f'Executing SQL:\n{sql}\nparams={dict(params or {})}')
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(text(sql), dict(params or {}))
                columns = list(result.keys())
                rows = result.fetchmany(self._max_rows) if self._max_rows else result.fetchall()
        except SQLAlchemyError as e:
            logger.error(f'Query execution failed: {e}')
            raise QBExecutionError(f'Query execution failed: {e}', sql=sql, original_error=e) from e

        logger.info(f'Query returned {len(rows)} rows')
        return QueryResult(columns=columns, rows=[list(row) for row in rows])
