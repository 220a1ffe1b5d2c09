"""Saved query records and the in-memory store."""

import itertools
import logging
import threading
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from datetime import timezone
from typing import Any

from namerec.qbuilder.exceptions import QBNotFoundError
from namerec.qbuilder.sql.generator import generate_sql
from namerec.qbuilder.types import QueryConfiguration

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class SavedQuery:
    """A named configuration snapshot together with the SQL it rendered to."""

    id: int
    name: str
    query_config: str
    generated_sql: str
    description: str | None = None
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def configuration(self) -> QueryConfiguration:
        """Deserialized configuration (ready to load back into the builder)."""
        return QueryConfiguration.from_json(self.query_config)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation
        """
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'queryConfig': self.query_config,
            'generatedSql': self.generated_sql,
            'createdAt': self.created_at.isoformat(),
        }


@dataclass
class MemorySavedQueryStore:
    """
    In-memory saved query store (single process).

    Ids are assigned sequentially starting at 1 and never reused.

    Thread-safe: Yes (uses RLock for concurrent access)
    """

    _queries: dict[int, SavedQuery] = field(default_factory=dict, init=False)
    _ids: Any = field(default_factory=lambda: itertools.count(1), init=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False)

    def list_queries(self) -> list[SavedQuery]:
        """List saved queries, oldest first."""
        with self._lock:
            return sorted(self._queries.values(), key=lambda query: (query.created_at, query.id))

    def get(self, query_id: int) -> SavedQuery:
        """
        Get a saved query by id.

        Raises:
            QBNotFoundError: If no query has this id
        """
        with self._lock:
            query = self._queries.get(query_id)
        if query is None:
            raise QBNotFoundError(str(query_id), f'Saved query not found: {query_id}')
        return query

    def create(
        self,
        name: str,
        config: QueryConfiguration,
        description: str | None = None,
    ) -> SavedQuery:
        """
        Save a configuration under a name.

        The SQL is rendered from the configuration at save time and stored
        alongside it.

        Args:
            name: Display name (must be non-blank)
            config: Configuration to save
            description: Optional free-text description

        Returns:
            The stored record

        Raises:
            ValueError: If name is blank
        """
        if not name or not name.strip():
            msg = 'Saved query name must not be empty'
            raise ValueError(msg)

        with self._lock:
            query = SavedQuery(
                id=next(self._ids),
                name=name.strip(),
                description=description or None,
                query_config=config.to_json(),
                generated_sql=generate_sql(config),
            )
            self._queries[query.id] = query

        logger.info(f'Saved query {query.id}: {query.name}')
        return query

    def delete(self, query_id: int) -> bool:
        """
        Delete a saved query.

        Returns:
            True if a query was deleted, False if the id was unknown
        """
        with self._lock:
            deleted = self._queries.pop(query_id, None) is not None
        if deleted:
            logger.info(f'Deleted saved query {query_id}')
        return deleted

    def __len__(self) -> int:
        with self._lock:
            return len(self._queries)
