"""Utility functions for column paths."""

import re
from dataclasses import dataclass

_IDENTIFIER_PATH_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_$]*(\.[A-Za-z_][A-Za-z0-9_$]*){0,2}$')


@dataclass(frozen=True, slots=True)
class ColumnPath:
    """Column reference split into its schema, table and column segments."""

    column: str
    table: str | None = None
    schema: str | None = None

    def __str__(self) -> str:
        return '.'.join(part for part in (self.schema, self.table, self.column) if part)


def parse_column_path(path: str) -> ColumnPath | None:
    """
    Parse a dotted identifier path into a ColumnPath.

    Args:
        path: 'column', 'table.column' or 'schema.table.column'

    Returns:
        ColumnPath, or None when the path is an expression rather than a plain identifier path

    Examples:
        >>> parse_column_path('public.users.status')
        ColumnPath(column='status', table='users', schema='public')
        >>> parse_column_path('COUNT(*)') is None
        True
    """
    path = path.strip()
    if not _IDENTIFIER_PATH_RE.match(path):
        return None
    parts = path.split('.')
    if len(parts) == 3:
        return ColumnPath(column=parts[2], table=parts[1], schema=parts[0])
    if len(parts) == 2:
        return ColumnPath(column=parts[1], table=parts[0])
    return ColumnPath(column=parts[0])


def form_column_path(table: str, column: str, schema: str | None = None) -> str:
    """
    Build the fully qualified path the UI stores in conditions and ordering.

    Args:
        table: Table name
        column: Column name
        schema: Optional schema name

    Returns:
        'schema.table.column' or 'table.column'
    """
    return str(ColumnPath(column=column, table=table, schema=schema or None))
