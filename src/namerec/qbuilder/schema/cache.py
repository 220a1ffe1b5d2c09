"""Column metadata cache keyed by (schema, table)."""

import threading

from namerec.qbuilder.types import ColumnInfo


class ColumnCache:
    """
    Cache of introspected column lists.

    Populated lazily by SchemaIntrospector the first time a table's columns
    are requested; entries live until invalidated.

    Thread-safe: Yes (uses RLock for concurrent access)

    Attributes:
        _columns: Cached column lists per (schema, table)
    """

    def __init__(self) -> None:
        """Initialize empty cache."""
        self._columns: dict[tuple[str, str], tuple[ColumnInfo, ...]] = {}
        self._lock = threading.RLock()

    def get(self, schema: str, table: str) -> tuple[ColumnInfo, ...] | None:
        """
        Get cached columns for a table.

        Args:
            schema: Schema name ('' for the default schema)
            table: Table name

        Returns:
            Cached columns or None if not cached
        """
        with self._lock:
            return self._columns.get((schema, table))

    def put(self, schema: str, table: str, columns: list[ColumnInfo] | tuple[ColumnInfo, ...]) -> None:
        """
        Cache columns for a table.

        Args:
            schema: Schema name ('' for the default schema)
            table: Table name
            columns: Columns in ordinal order
        """
        with self._lock:
            self._columns[(schema, table)] = tuple(columns)

    def has(self, schema: str, table: str) -> bool:
        """Check if a table's columns are cached."""
        with self._lock:
            return (schema, table) in self._columns

    def tables(self) -> list[tuple[str, str]]:
        """
        List cached tables.

        Returns:
            Sorted (schema, table) pairs
        """
        with self._lock:
            return sorted(self._columns)

    def invalidate(self, schema: str, table: str) -> None:
        """Drop one table from the cache."""
        with self._lock:
            self._columns.pop((schema, table), None)

    def clear_schema(self, schema: str) -> None:
        """Drop every table of a schema from the cache."""
        with self._lock:
            for key in [key for key in self._columns if key[0] == schema]:
                del self._columns[key]

    def clear_all(self) -> None:
        """Clear all cached data."""
        with self._lock:
            self._columns.clear()
