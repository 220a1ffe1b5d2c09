"""Schema introspection for the table and column pickers."""

import logging
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from namerec.qbuilder.exceptions import QBExecutionError
from namerec.qbuilder.exceptions import QBNotFoundError
from namerec.qbuilder.schema.cache import ColumnCache
from namerec.qbuilder.types import ColumnInfo
from namerec.qbuilder.types import TableInfo

logger = logging.getLogger(__name__)


def _read_table_names(sync_conn: Any, schema: str | None) -> list[str]:
    return sorted(inspect(sync_conn).get_table_names(schema=schema))


def _read_columns(sync_conn: Any, table: str, schema: str | None) -> list[ColumnInfo] | None:
    inspector = inspect(sync_conn)
    if not inspector.has_table(table, schema=schema):
        return None

    primary_key = set(inspector.get_pk_constraint(table, schema=schema).get('constrained_columns') or ())
    foreign_keys: dict[str, str] = {}
    for fk in inspector.get_foreign_keys(table, schema=schema):
        for column_name in fk.get('constrained_columns') or ():
            foreign_keys[column_name] = fk['referred_table']

    return [
        ColumnInfo(
            name=column['name'],
            type=str(column['type']).upper(),
            nullable=bool(column.get('nullable', True)),
            primary_key=column['name'] in primary_key,
            foreign_key=foreign_keys.get(column['name']),
        )
        for column in inspector.get_columns(table, schema=schema)
    ]


class SchemaIntrospector:
    """
    Lists tables and columns of the connected data source.

    Column lists are cached per (schema, table) and fetched lazily on first
    request; call `refresh` after schema changes.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        schema: str | None = None,
        cache: ColumnCache | None = None,
    ) -> None:
        """
        Initialize introspector.

        Args:
            engine: Async engine of the data source
            schema: Default schema (None = database default, e.g. 'public' on PostgreSQL)
            cache: Optional custom cache (default: new ColumnCache)
        """
        self._engine = engine
        self._schema = schema
        self._cache = cache or ColumnCache()

    @property
    def cache(self) -> ColumnCache:
        """Get the column cache."""
        return self._cache

    async def list_tables(self, schema: str | None = None) -> list[TableInfo]:
        """
        List tables of a schema.

        Args:
            schema: Schema name (None = introspector default)

        Returns:
            Tables sorted by name

        Raises:
            QBExecutionError: If the database cannot be introspected
        """
        schema = schema or self._schema
        try:
            async with self._engine.connect() as conn:
                names = await conn.run_sync(_read_table_names, schema)
        except SQLAlchemyError as e:
            msg = f'Failed to list tables: {e}'
            raise QBExecutionError(msg, original_error=e) from e

        logger.debug(f'Found {len(names)} tables in schema {schema or "<default>"}')
        return [TableInfo(name=name, schema=schema or '') for name in names]

    async def get_columns(self, table: str, schema: str | None = None) -> tuple[ColumnInfo, ...]:
        """
        Get columns of a table, from cache when available.

        Args:
            table: Table name
            schema: Schema name (None = introspector default)

        Returns:
            Columns in ordinal order

        Raises:
            QBNotFoundError: If the table does not exist
            QBExecutionError: If the database cannot be introspected
        """
        schema = schema or self._schema
        cache_schema = schema or ''
        if (cached := self._cache.get(cache_schema, table)) is not None:
            return cached

        try:
            async with self._engine.connect() as conn:
                columns = await conn.run_sync(_read_columns, table, schema)
        except SQLAlchemyError as e:
            msg = f'Failed to read columns of {table}: {e}'
            raise QBExecutionError(msg, original_error=e) from e

        if columns is None:
            raise QBNotFoundError(table, f'Table not found: {table}')

        logger.debug(f'Cached {len(columns)} columns for {cache_schema}.{table}')
        self._cache.put(cache_schema, table, columns)
        return tuple(columns)

    def refresh(self, table: str | None = None, schema: str | None = None) -> None:
        """
        Invalidate cached columns.

        Args:
            table: Table to invalidate (None = every table of the schema)
            schema: Schema name (None = introspector default)
        """
        cache_schema = schema or self._schema or ''
        if table is None:
            self._cache.clear_schema(cache_schema)
        else:
            self._cache.invalidate(cache_schema, table)
