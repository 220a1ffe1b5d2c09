"""
Query service - the execute / export / preview / save entry points.

Every path that sends text to the database goes through the same two screens,
in order: the read-only gate (`is_select_statement`) and then the structural
validator (`validate_sql`). Only text accepted by both reaches the executor.
"""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import create_async_engine

from namerec.qbuilder.exceptions import QBConfigurationError
from namerec.qbuilder.exceptions import QBError
from namerec.qbuilder.exceptions import QBValidationError
from namerec.qbuilder.executor import QueryExecutor
from namerec.qbuilder.executor import SQLAlchemyQueryExecutor
from namerec.qbuilder.saved import MemorySavedQueryStore
from namerec.qbuilder.saved import SavedQuery
from namerec.qbuilder.schema.introspector import SchemaIntrospector
from namerec.qbuilder.settings import DEFAULT_PAGE_SIZE
from namerec.qbuilder.settings import Settings
from namerec.qbuilder.sql.generator import generate_parameterized
from namerec.qbuilder.sql.generator import generate_sql
from namerec.qbuilder.sql.validator import is_select_statement
from namerec.qbuilder.sql.validator import validate_sql
from namerec.qbuilder.types import ColumnInfo
from namerec.qbuilder.types import QueryConfiguration
from namerec.qbuilder.types import QueryResult
from namerec.qbuilder.types import TableInfo
from namerec.qbuilder.types import ValidationResult

logger = logging.getLogger(__name__)

ERROR_READ_ONLY = 'Only SELECT queries are allowed'


class QueryBuilderService:
    """Facade tying the generator, the validator, an executor and the saved query store together."""

    def __init__(
        self,
        executor: QueryExecutor,
        store: MemorySavedQueryStore | None = None,
        introspector: SchemaIntrospector | None = None,
        dialect: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        """
        Initialize service.

        Args:
            executor: Executor that runs accepted query text
            store: Saved query store (default: new in-memory store)
            introspector: Optional schema introspector for table/column listing
            dialect: Optional sqlglot dialect used for previews
            page_size: Default rows per page for `execute_page`
        """
        if page_size < 1:
            msg = 'page_size must be positive integer'
            raise ValueError(msg)
        self._executor = executor
        self._store = store if store is not None else MemorySavedQueryStore()
        self._introspector = introspector
        self._dialect = dialect
        self._page_size = page_size

    @classmethod
    def from_settings(cls, settings: Settings) -> 'QueryBuilderService':
        """
        Build a service with a SQLAlchemy executor from settings.

        Raises:
            QBConfigurationError: If no database URL is configured
        """
        if not settings.database_url:
            msg = 'Database URL is not configured'
            raise QBConfigurationError(msg, 'QBUILDER_DATABASE_URL')

        engine = create_async_engine(settings.database_url)
        return cls(
            executor=SQLAlchemyQueryExecutor(engine, max_rows=settings.max_rows),
            introspector=SchemaIntrospector(engine, schema=settings.default_schema or None),
            dialect=settings.dialect,
            page_size=settings.page_size,
        )

    @property
    def store(self) -> MemorySavedQueryStore:
        """Get the saved query store."""
        return self._store

    # Rendering and screening

    def preview(self, config: QueryConfiguration) -> str:
        """Render the configuration as it is shown to the user."""
        return generate_sql(config, self._dialect)

    def validate(self, sql: str) -> ValidationResult:
        """Screen query text without executing it."""
        return validate_sql(sql)

    def check(self, sql: str) -> None:
        """
        Apply the read-only gate, then the validator.

        Raises:
            QBValidationError: With the gate message alone, or with every validator message
        """
        if not is_select_statement(sql):
            logger.info('Rejected non-SELECT query')
            raise QBValidationError([ERROR_READ_ONLY], sql=sql)

        result = validate_sql(sql)
        if not result.is_valid:
            logger.info(f'Rejected query: {"; ".join(result.errors)}')
            raise QBValidationError(list(result.errors), sql=sql)

    # Execution

    async def execute(self, sql: str, params: Mapping[str, Any] | None = None) -> QueryResult:
        """
        Screen and execute query text.

        Raises:
            QBValidationError: If the text is rejected (executor is not called)
            QBExecutionError: If the database rejects the query
        """
        self.check(sql)
        return await self._executor.execute(sql, params)

    async def execute_configuration(self, config: QueryConfiguration) -> QueryResult:
        """
        Execute a configuration with WHERE values bound as parameters.

        The inline-literal preview is what gets screened, since that is the text
        the user saw; the parameterized rendering of the same configuration, in
        the same dialect, is what gets executed.

        Raises:
            QBValidationError: If the rendered text is rejected
            QBConfigurationError: If the dialect cannot keep the bind parameters
            QBExecutionError: If the database rejects the query
        """
        self.check(self.preview(config))
        statement = generate_parameterized(config, self._dialect)
        return await self._executor.execute(statement.text, statement.params)

    async def execute_page(self, sql: str, page: int = 1, page_size: int | None = None) -> QueryResult:
        """
        Execute query text and return one page of the result (1-based).

        Raises:
            QBValidationError: If the text is rejected
            QBExecutionError: If the database rejects the query
            ValueError: If page or page_size is not positive
        """
        result = await self.execute(sql)
        return result.page(page, page_size or self._page_size)

    async def export_csv(self, sql: str) -> str:
        """
        Screen, execute and render the full result as CSV.

        Raises:
            QBValidationError: If the text is rejected
            QBExecutionError: If the database rejects the query
        """
        result = await self.execute(sql)
        logger.info(f'Exporting {result.row_count} rows as CSV')
        return result.to_csv()

    # Saved queries

    def save_query(
        self,
        name: str,
        config: QueryConfiguration,
        description: str | None = None,
    ) -> SavedQuery:
        """Save a configuration together with its rendered SQL."""
        return self._store.create(name, config, description)

    def list_saved_queries(self) -> list[SavedQuery]:
        """List saved queries, oldest first."""
        return self._store.list_queries()

    def get_saved_query(self, query_id: int) -> SavedQuery:
        """
        Get a saved query.

        Raises:
            QBNotFoundError: If no query has this id
        """
        return self._store.get(query_id)

    def delete_saved_query(self, query_id: int) -> bool:
        """Delete a saved query; False if the id was unknown."""
        return self._store.delete(query_id)

    # Schema

    def _require_introspector(self) -> SchemaIntrospector:
        if self._introspector is None:
            msg = 'Schema introspection is not configured'
            raise QBError(msg)
        return self._introspector

    async def list_tables(self, schema: str | None = None) -> list[TableInfo]:
        """
        List tables available to the builder.

        Raises:
            QBError: If the service has no introspector
        """
        return await self._require_introspector().list_tables(schema)

    async def get_columns(self, table: str, schema: str | None = None) -> tuple[ColumnInfo, ...]:
        """
        List columns of a table.

        Raises:
            QBError: If the service has no introspector
            QBNotFoundError: If the table does not exist
        """
        return await self._require_introspector().get_columns(table, schema)
