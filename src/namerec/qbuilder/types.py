"""Type definitions for the query builder data model."""

import csv
import io
import json
import uuid
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Any
from typing import TypeVar

from namerec.qbuilder.constants import AggregateFunction
from namerec.qbuilder.constants import ConditionOperator
from namerec.qbuilder.constants import JoinType
from namerec.qbuilder.constants import LogicalOperator
from namerec.qbuilder.constants import OrderDirection
from namerec.qbuilder.exceptions import QBConfigurationError

EnumT = TypeVar('EnumT', bound=Enum)


def new_id(prefix: str) -> str:
    """Generate an identifier for joins, join conditions and conditions."""
    return f'{prefix}_{uuid.uuid4().hex[:12]}'


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key (wire dicts use camelCase, Python callers snake_case)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def coerce_enum(enum_cls: type[EnumT], value: Any, path: str) -> EnumT:
    """
    Convert a wire value into an enum member.

    Raises:
        QBConfigurationError: If the value is not a member of the enum
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        supported = ', '.join(str(member.value) for member in enum_cls)
        msg = f"Unknown {enum_cls.__name__} '{value}'. Supported: {supported}"
        raise QBConfigurationError(msg, path) from None


@dataclass(frozen=True, slots=True)
class TableRef:
    """A queryable relation; uniqueness key is (schema, name)."""

    name: str
    schema: str = ''
    alias: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        """Uniqueness key."""
        return (self.schema, self.name)

    @property
    def qualified_name(self) -> str:
        """schema.name, or the bare name when no schema is set."""
        return f'{self.schema}.{self.name}' if self.schema else self.name

    @property
    def references(self) -> frozenset[str]:
        """Every string a join or column path may use to refer to this table."""
        refs = {self.name, self.qualified_name}
        if self.alias:
            refs.add(self.alias)
        return frozenset(refs)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation
        """
        return {'schema': self.schema, 'name': self.name, 'alias': self.alias or ''}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | str) -> 'TableRef':
        """Build from a wire dict or a bare 'schema.name' / 'name' string."""
        if isinstance(data, str):
            schema, _, name = data.rpartition('.')
            return cls(name=name, schema=schema)
        return cls(
            name=_pick(data, 'name', 'tableName', 'table_name', default=''),
            schema=_pick(data, 'schema', default=''),
            alias=_pick(data, 'alias') or None,
        )


@dataclass(frozen=True, slots=True)
class SelectedColumn:
    """A projected output column."""

    table_name: str
    column_name: str
    schema: str = ''
    alias: str | None = None
    aggregate_function: AggregateFunction | None = None
    function_params: tuple[str, ...] = ()

    @property
    def id(self) -> str:
        """Deterministic identifier derived from schema.tableName.columnName."""
        return '.'.join(part for part in (self.schema, self.table_name, self.column_name) if part)

    @property
    def key(self) -> tuple[str, str, str]:
        """Uniqueness key."""
        return (self.schema, self.table_name, self.column_name)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation
        """
        result: dict[str, Any] = {
            'id': self.id,
            'schema': self.schema,
            'tableName': self.table_name,
            'columnName': self.column_name,
        }
        if self.alias:
            result['alias'] = self.alias
        if self.aggregate_function:
            result['aggregateFunction'] = self.aggregate_function.value
        if self.function_params:
            result['functionParams'] = list(self.function_params)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = 'selectedColumns') -> 'SelectedColumn':
        """Build from a wire dict."""
        function = _pick(data, 'aggregateFunction', 'aggregate_function', 'function')
        return cls(
            table_name=_pick(data, 'tableName', 'table_name', default=''),
            column_name=_pick(data, 'columnName', 'column_name', default=''),
            schema=_pick(data, 'schema', default=''),
            alias=_pick(data, 'alias') or None,
            aggregate_function=(
                coerce_enum(AggregateFunction, function, f'{path}.aggregateFunction') if function else None
            ),
            function_params=tuple(_pick(data, 'functionParams', 'function_params', default=())),
        )


@dataclass(frozen=True, slots=True)
class JoinCondition:
    """Extra equality predicate ANDed into a join's ON clause."""

    left_column: str = ''
    right_column: str = ''
    id: str = field(default_factory=lambda: new_id('join_condition'))

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation
        """
        return {'id': self.id, 'leftColumn': self.left_column, 'rightColumn': self.right_column}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'JoinCondition':
        """Build from a wire dict."""
        return cls(
            left_column=_pick(data, 'leftColumn', 'left_column', default=''),
            right_column=_pick(data, 'rightColumn', 'right_column', default=''),
            id=_pick(data, 'id') or new_id('join_condition'),
        )


@dataclass(frozen=True, slots=True)
class JoinSpec:
    """One join edge between two tables."""

    left_table: str = ''
    left_column: str = ''
    right_table: str = ''
    right_column: str = ''
    join_type: JoinType = JoinType.INNER
    additional_conditions: tuple[JoinCondition, ...] = ()
    id: str = field(default_factory=lambda: new_id('join'))

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation
        """
        return {
            'id': self.id,
            'joinType': self.join_type.value,
            'leftTable': self.left_table,
            'leftColumn': self.left_column,
            'rightTable': self.right_table,
            'rightColumn': self.right_column,
            'additionalConditions': [cond.to_dict() for cond in self.additional_conditions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = 'joins') -> 'JoinSpec':
        """Build from a wire dict."""
        join_type = _pick(data, 'joinType', 'join_type', 'type', default=JoinType.INNER.value)
        conditions = _pick(data, 'additionalConditions', 'additional_conditions', default=())
        return cls(
            left_table=_pick(data, 'leftTable', 'left_table', default=''),
            left_column=_pick(data, 'leftColumn', 'left_column', default=''),
            right_table=_pick(data, 'rightTable', 'right_table', default=''),
            right_column=_pick(data, 'rightColumn', 'right_column', default=''),
            join_type=coerce_enum(JoinType, join_type, f'{path}.joinType'),
            additional_conditions=tuple(JoinCondition.from_dict(cond) for cond in conditions),
            id=_pick(data, 'id') or new_id('join'),
        )


@dataclass(frozen=True, slots=True)
class QueryCondition:
    """One WHERE predicate; logical_operator links it to the previous condition."""

    column: str = ''
    operator: ConditionOperator = ConditionOperator.EQ
    value: str = ''
    logical_operator: LogicalOperator | None = None
    id: str = field(default_factory=lambda: new_id('condition'))

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation
        """
        result: dict[str, Any] = {
            'id': self.id,
            'column': self.column,
            'operator': self.operator.value,
            'value': self.value,
        }
        if self.logical_operator:
            result['logicalOperator'] = self.logical_operator.value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = 'conditions') -> 'QueryCondition':
        """Build from a wire dict."""
        logical = _pick(data, 'logicalOperator', 'logical_operator')
        value = _pick(data, 'value', default='')
        return cls(
            column=_pick(data, 'column', default=''),
            operator=coerce_enum(ConditionOperator, _pick(data, 'operator', default='='), f'{path}.operator'),
            value=value if isinstance(value, str) else str(value),
            logical_operator=coerce_enum(LogicalOperator, logical, f'{path}.logicalOperator') if logical else None,
            id=_pick(data, 'id') or new_id('condition'),
        )


@dataclass(frozen=True, slots=True)
class OrderSpec:
    """ORDER BY entry."""

    column: str
    direction: OrderDirection = OrderDirection.ASC

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation
        """
        return {'column': self.column, 'direction': self.direction.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = 'orderBy') -> 'OrderSpec':
        """Build from a wire dict."""
        return cls(
            column=_pick(data, 'column', default=''),
            direction=coerce_enum(OrderDirection, _pick(data, 'direction', default='ASC'), f'{path}.direction'),
        )


@dataclass(frozen=True, slots=True)
class QueryConfiguration:
    """
    Structured description of a query under construction.

    The first selected table is the anchor (FROM) table. Instances are never
    mutated: every operation in `namerec.qbuilder.model` returns a new value.
    """

    selected_tables: tuple[TableRef, ...] = ()
    selected_columns: tuple[SelectedColumn, ...] = ()
    joins: tuple[JoinSpec, ...] = ()
    conditions: tuple[QueryCondition, ...] = ()
    group_by: tuple[str, ...] = ()
    order_by: tuple[OrderSpec, ...] = ()
    limit: int | None = None
    distinct: bool = False

    @property
    def anchor_table(self) -> TableRef | None:
        """FROM table, or None for an empty configuration."""
        return self.selected_tables[0] if self.selected_tables else None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary in the UI wire shape (camelCase keys)
        """
        result: dict[str, Any] = {
            'selectedTables': [table.to_dict() for table in self.selected_tables],
            'selectedColumns': [column.to_dict() for column in self.selected_columns],
            'joins': [join.to_dict() for join in self.joins],
            'conditions': [condition.to_dict() for condition in self.conditions],
            'groupBy': list(self.group_by),
            'orderBy': [order.to_dict() for order in self.order_by],
            'distinct': self.distinct,
        }
        if self.limit is not None:
            result['limit'] = self.limit
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'QueryConfiguration':
        """
        Build a configuration from its wire representation.

        Raises:
            QBConfigurationError: If an enumerated field holds an unknown value
        """
        limit = _pick(data, 'limit')
        return cls(
            selected_tables=tuple(
                TableRef.from_dict(table) for table in _pick(data, 'selectedTables', 'selected_tables', default=())
            ),
            selected_columns=tuple(
                SelectedColumn.from_dict(column, f'selectedColumns[{i}]')
                for i, column in enumerate(_pick(data, 'selectedColumns', 'selected_columns', default=()))
            ),
            joins=tuple(JoinSpec.from_dict(join, f'joins[{i}]') for i, join in enumerate(data.get('joins') or ())),
            conditions=tuple(
                QueryCondition.from_dict(condition, f'conditions[{i}]')
                for i, condition in enumerate(data.get('conditions') or ())
            ),
            group_by=tuple(_pick(data, 'groupBy', 'group_by', default=())),
            order_by=tuple(
                OrderSpec.from_dict(order, f'orderBy[{i}]')
                for i, order in enumerate(_pick(data, 'orderBy', 'order_by', default=()))
            ),
            limit=int(limit) if limit not in (None, '') else None,
            distinct=bool(data.get('distinct', False)),
        )

    def to_json(self) -> str:
        """Serialize for a saved query record."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, payload: str) -> 'QueryConfiguration':
        """Deserialize a saved query record."""
        return cls.from_dict(json.loads(payload))


@dataclass(frozen=True, slots=True)
class Subquery:
    """
    Nested query built alongside the main one.

    It is edited like any configuration and attached to the main query as the
    value of an IN condition, where it becomes a derived table named `alias`.
    """

    name: str
    alias: str
    config: QueryConfiguration = field(default_factory=QueryConfiguration)
    id: str = field(default_factory=lambda: new_id('subquery'))

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation
        """
        return {'id': self.id, 'name': self.name, 'alias': self.alias, 'config': self.config.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Subquery':
        """Build from a wire dict."""
        return cls(
            name=_pick(data, 'name', default=''),
            alias=_pick(data, 'alias', default=''),
            config=QueryConfiguration.from_dict(_pick(data, 'config', default={})),
            id=_pick(data, 'id') or new_id('subquery'),
        )


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of screening query text."""

    is_valid: bool
    errors: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary with 'isValid' and 'errors' keys
        """
        return {'isValid': self.is_valid, 'errors': list(self.errors)}


@dataclass(slots=True)
class QueryResult:
    """Result of query execution."""

    columns: list[str]
    rows: list[list[Any]]

    @property
    def row_count(self) -> int:
        """Number of rows."""
        return len(self.rows)

    def page(self, page: int, page_size: int) -> 'QueryResult':
        """
        Slice one page of rows (1-based).

        Args:
            page: Page number, starting at 1
            page_size: Rows per page

        Returns:
            QueryResult with the same columns and the rows of that page

        Raises:
            ValueError: If page or page_size is not positive
        """
        if page < 1 or page_size < 1:
            msg = 'page and page_size must be positive integers'
            raise ValueError(msg)
        start = (page - 1) * page_size
        return QueryResult(columns=list(self.columns), rows=self.rows[start:start + page_size])

    def to_csv(self) -> str:
        """Render as CSV with a header row; NULL becomes an empty cell."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator='\n')
        writer.writerow(self.columns)
        for row in self.rows:
            writer.writerow(['' if cell is None else cell for cell in row])
        return buffer.getvalue()

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary with 'columns' and 'rows' keys
        """
        return {'columns': self.columns, 'rows': self.rows}


@dataclass(frozen=True, slots=True)
class ColumnInfo:
    """Column description returned by schema introspection."""

    name: str
    type: str
    nullable: bool
    primary_key: bool = False
    foreign_key: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation
        """
        return {
            'name': self.name,
            'type': self.type,
            'nullable': self.nullable,
            'primaryKey': self.primary_key,
            'foreignKey': self.foreign_key,
        }


@dataclass(frozen=True, slots=True)
class TableInfo:
    """Table description returned by schema introspection."""

    name: str
    schema: str = ''
    row_count: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation
        """
        return {'schema': self.schema, 'name': self.name, 'rowCount': self.row_count}
