"""
Pure operations on QueryConfiguration.

Every function takes a configuration snapshot and returns a new one; nothing
is mutated in place, so the generator can treat each snapshot as immutable.
Adding a table or column that is already present is a no-op. Removing a table
cascades to every column, join, condition, group-by and order-by entry that
refers to it, so the aggregate never holds dangling references.
"""

import logging
from dataclasses import replace
from typing import Any

from namerec.qbuilder.constants import MEMBERSHIP_OPERATORS
from namerec.qbuilder.constants import AggregateFunction
from namerec.qbuilder.constants import ConditionOperator
from namerec.qbuilder.constants import JoinType
from namerec.qbuilder.constants import LogicalOperator
from namerec.qbuilder.constants import OrderDirection
from namerec.qbuilder.exceptions import QBConfigurationError
from namerec.qbuilder.exceptions import QBNotFoundError
from namerec.qbuilder.sql.generator import render_subquery
from namerec.qbuilder.types import JoinCondition
from namerec.qbuilder.types import JoinSpec
from namerec.qbuilder.types import OrderSpec
from namerec.qbuilder.types import QueryCondition
from namerec.qbuilder.types import QueryConfiguration
from namerec.qbuilder.types import SelectedColumn
from namerec.qbuilder.types import Subquery
from namerec.qbuilder.types import TableRef
from namerec.qbuilder.types import coerce_enum
from namerec.qbuilder.utils import parse_column_path

logger = logging.getLogger(__name__)

_COLUMN_MUTABLE_FIELDS = frozenset({'alias', 'aggregate_function', 'function_params'})
_JOIN_MUTABLE_FIELDS = frozenset({'join_type', 'left_table', 'left_column', 'right_table', 'right_column'})
_CONDITION_MUTABLE_FIELDS = frozenset({'column', 'operator', 'value', 'logical_operator'})


def empty_configuration() -> QueryConfiguration:
    """Configuration a new editing session starts from."""
    return QueryConfiguration()


# Tables


def find_table(config: QueryConfiguration, reference: str) -> TableRef | None:
    """
    Resolve a table reference used by joins and column paths.

    Args:
        config: Configuration to search
        reference: Table name, 'schema.name' or alias

    Returns:
        Matching selected table or None
    """
    for table in config.selected_tables:
        if reference in table.references:
            return table
    return None


def add_table(config: QueryConfiguration, table: TableRef) -> QueryConfiguration:
    """Append a table; a (schema, name) pair already present is a no-op."""
    if any(existing.key == table.key for existing in config.selected_tables):
        logger.debug(f'Table {table.qualified_name} already selected')
        return config
    return replace(config, selected_tables=(*config.selected_tables, table))


def update_table(config: QueryConfiguration, schema: str, name: str, *, alias: str | None) -> QueryConfiguration:
    """
    Set or clear a table alias.

    Raises:
        QBNotFoundError: If the table is not selected
    """
    key = (schema, name)
    if not any(table.key == key for table in config.selected_tables):
        raise QBNotFoundError(f'{schema}.{name}', f'Table is not selected: {schema}.{name}')
    tables = tuple(
        replace(table, alias=alias or None) if table.key == key else table
        for table in config.selected_tables
    )
    return replace(config, selected_tables=tables)


def _column_belongs_to(column: SelectedColumn, table: TableRef) -> bool:
    if column.table_name not in table.references:
        return False
    return not column.schema or column.schema == table.schema


def _path_belongs_to(path: str, table: TableRef) -> bool:
    parsed = parse_column_path(path)
    if parsed is None or parsed.table is None:
        return False
    reference = f'{parsed.schema}.{parsed.table}' if parsed.schema else parsed.table
    return reference in table.references


def remove_table(config: QueryConfiguration, schema: str, name: str) -> QueryConfiguration:
    """
    Remove a table and every entry that refers to it.

    Args:
        config: Current configuration
        schema: Schema of the table to remove
        name: Name of the table to remove

    Returns:
        New configuration (unchanged when the table is not selected)
    """
    table = next((t for t in config.selected_tables if t.key == (schema, name)), None)
    if table is None:
        return config

    refs = table.references
    columns = tuple(c for c in config.selected_columns if not _column_belongs_to(c, table))
    joins = tuple(j for j in config.joins if j.left_table not in refs and j.right_table not in refs)
    conditions = tuple(c for c in config.conditions if not _path_belongs_to(c.column, table))
    group_by = tuple(path for path in config.group_by if not _path_belongs_to(path, table))
    order_by = tuple(order for order in config.order_by if not _path_belongs_to(order.column, table))

    logger.debug(
        f'Removed table {table.qualified_name}: '
        f'{len(config.selected_columns) - len(columns)} columns, '
        f'{len(config.joins) - len(joins)} joins, '
        f'{len(config.conditions) - len(conditions)} conditions cascaded'
    )
    return replace(
        config,
        selected_tables=tuple(t for t in config.selected_tables if t.key != table.key),
        selected_columns=columns,
        joins=joins,
        conditions=conditions,
        group_by=group_by,
        order_by=order_by,
    )


# Columns


def add_column(config: QueryConfiguration, column: SelectedColumn) -> QueryConfiguration:
    """
    Append a column, selecting its table first when needed.

    A (schema, tableName, columnName) triple already present is a no-op.
    """
    if any(existing.key == column.key for existing in config.selected_columns):
        logger.debug(f'Column {column.id} already selected')
        return config
    if not any(_column_belongs_to(column, table) for table in config.selected_tables):
        config = add_table(config, TableRef(name=column.table_name, schema=column.schema))
    return replace(config, selected_columns=(*config.selected_columns, column))


def _coerce_column_changes(changes: dict[str, Any]) -> dict[str, Any]:
    unknown = set(changes) - _COLUMN_MUTABLE_FIELDS
    if unknown:
        msg = f'Column fields cannot be changed: {", ".join(sorted(unknown))}'
        raise QBConfigurationError(msg, 'selectedColumns')
    if changes.get('aggregate_function'):
        changes['aggregate_function'] = coerce_enum(
            AggregateFunction, changes['aggregate_function'], 'selectedColumns.aggregateFunction'
        )
    elif 'aggregate_function' in changes:
        changes['aggregate_function'] = None
    if 'alias' in changes:
        changes['alias'] = changes['alias'] or None
    if 'function_params' in changes:
        changes['function_params'] = tuple(changes['function_params'] or ())
    return changes


def update_column(config: QueryConfiguration, column_id: str, **changes: Any) -> QueryConfiguration:
    """
    Change alias, aggregate function or function params of a selected column.

    Raises:
        QBNotFoundError: If no column has this id
        QBConfigurationError: If a field cannot be changed or the function is unknown
    """
    if not any(column.id == column_id for column in config.selected_columns):
        raise QBNotFoundError(column_id, f'Column is not selected: {column_id}')
    changes = _coerce_column_changes(changes)
    columns = tuple(
        replace(column, **changes) if column.id == column_id else column
        for column in config.selected_columns
    )
    return replace(config, selected_columns=columns)


def remove_column(config: QueryConfiguration, column_id: str) -> QueryConfiguration:
    """Remove a selected column; unknown ids are ignored."""
    return replace(
        config,
        selected_columns=tuple(c for c in config.selected_columns if c.id != column_id),
    )


def move_column(config: QueryConfiguration, column_id: str, index: int) -> QueryConfiguration:
    """
    Move a selected column to a new output position.

    Raises:
        QBNotFoundError: If no column has this id
    """
    columns = list(config.selected_columns)
    position = next((i for i, column in enumerate(columns) if column.id == column_id), None)
    if position is None:
        raise QBNotFoundError(column_id, f'Column is not selected: {column_id}')
    column = columns.pop(position)
    index = max(0, min(index, len(columns)))
    columns.insert(index, column)
    return replace(config, selected_columns=tuple(columns))


# Joins


def _check_join_tables(config: QueryConfiguration, join: JoinSpec, path: str) -> None:
    # Empty references are allowed while the user is still filling the join in.
    for side, reference in (('leftTable', join.left_table), ('rightTable', join.right_table)):
        if reference and find_table(config, reference) is None:
            msg = f'Join refers to a table that is not selected: {reference}'
            raise QBConfigurationError(msg, f'{path}.{side}')


def add_join(config: QueryConfiguration, join: JoinSpec | None = None) -> QueryConfiguration:
    """
    Append a join edge.

    Without a join, an INNER join between the first two selected tables is
    added (nothing happens when fewer than two tables are selected).

    Raises:
        QBConfigurationError: If the join refers to a table that is not selected
    """
    if join is None:
        if len(config.selected_tables) < 2:
            return config
        left, right = config.selected_tables[:2]
        join = JoinSpec(left_table=left.qualified_name, right_table=right.qualified_name)
    _check_join_tables(config, join, f'joins[{len(config.joins)}]')
    return replace(config, joins=(*config.joins, join))


def _join_index(config: QueryConfiguration, join_id: str) -> int:
    for i, join in enumerate(config.joins):
        if join.id == join_id:
            return i
    raise QBNotFoundError(join_id, f'Join not found: {join_id}')


def _replace_join(config: QueryConfiguration, index: int, join: JoinSpec) -> QueryConfiguration:
    joins = list(config.joins)
    joins[index] = join
    return replace(config, joins=tuple(joins))


def update_join(config: QueryConfiguration, join_id: str, **changes: Any) -> QueryConfiguration:
    """
    Change the type, tables or columns of a join.

    Raises:
        QBNotFoundError: If no join has this id
        QBConfigurationError: If a field cannot be changed or a table is not selected
    """
    index = _join_index(config, join_id)
    unknown = set(changes) - _JOIN_MUTABLE_FIELDS
    if unknown:
        msg = f'Join fields cannot be changed: {", ".join(sorted(unknown))}'
        raise QBConfigurationError(msg, f'joins[{index}]')
    if 'join_type' in changes:
        changes['join_type'] = coerce_enum(JoinType, changes['join_type'], f'joins[{index}].joinType')
    join = replace(config.joins[index], **changes)
    _check_join_tables(config, join, f'joins[{index}]')
    return _replace_join(config, index, join)


def remove_join(config: QueryConfiguration, join_id: str) -> QueryConfiguration:
    """Remove a join; unknown ids are ignored."""
    return replace(config, joins=tuple(j for j in config.joins if j.id != join_id))


def add_join_condition(
    config: QueryConfiguration,
    join_id: str,
    left_column: str = '',
    right_column: str = '',
) -> QueryConfiguration:
    """
    Append an extra equality predicate to a join (composite keys).

    Raises:
        QBNotFoundError: If no join has this id
    """
    index = _join_index(config, join_id)
    join = config.joins[index]
    condition = JoinCondition(left_column=left_column, right_column=right_column)
    return _replace_join(
        config, index, replace(join, additional_conditions=(*join.additional_conditions, condition))
    )


def update_join_condition(
    config: QueryConfiguration,
    join_id: str,
    condition_id: str,
    *,
    left_column: str | None = None,
    right_column: str | None = None,
) -> QueryConfiguration:
    """
    Change one side (or both) of an extra join predicate.

    Raises:
        QBNotFoundError: If the join or the predicate does not exist
    """
    index = _join_index(config, join_id)
    join = config.joins[index]
    if not any(cond.id == condition_id for cond in join.additional_conditions):
        raise QBNotFoundError(condition_id, f'Join condition not found: {condition_id}')

    changes: dict[str, str] = {}
    if left_column is not None:
        changes['left_column'] = left_column
    if right_column is not None:
        changes['right_column'] = right_column
    conditions = tuple(
        replace(cond, **changes) if cond.id == condition_id else cond
        for cond in join.additional_conditions
    )
    return _replace_join(config, index, replace(join, additional_conditions=conditions))


def remove_join_condition(config: QueryConfiguration, join_id: str, condition_id: str) -> QueryConfiguration:
    """
    Remove an extra join predicate; unknown predicate ids are ignored.

    Raises:
        QBNotFoundError: If no join has this id
    """
    index = _join_index(config, join_id)
    join = config.joins[index]
    conditions = tuple(cond for cond in join.additional_conditions if cond.id != condition_id)
    return _replace_join(config, index, replace(join, additional_conditions=conditions))


# Conditions


def add_condition(
    config: QueryConfiguration,
    column: str = '',
    operator: ConditionOperator | str = ConditionOperator.EQ,
    value: str = '',
    logical_operator: LogicalOperator | str | None = None,
) -> QueryConfiguration:
    """
    Append a WHERE condition.

    Conditions after the first one are connected with AND unless a logical
    operator is given.

    Raises:
        QBConfigurationError: If the operator or logical operator is unknown
    """
    path = f'conditions[{len(config.conditions)}]'
    if logical_operator is None and config.conditions:
        logical_operator = LogicalOperator.AND
    condition = QueryCondition(
        column=column,
        operator=coerce_enum(ConditionOperator, operator, f'{path}.operator'),
        value=value,
        logical_operator=(
            coerce_enum(LogicalOperator, logical_operator, f'{path}.logicalOperator') if logical_operator else None
        ),
    )
    return replace(config, conditions=(*config.conditions, condition))


def update_condition(config: QueryConfiguration, condition_id: str, **changes: Any) -> QueryConfiguration:
    """
    Change column, operator, value or logical operator of a condition.

    Raises:
        QBNotFoundError: If no condition has this id
        QBConfigurationError: If a field cannot be changed or an operator is unknown
    """
    index = next((i for i, cond in enumerate(config.conditions) if cond.id == condition_id), None)
    if index is None:
        raise QBNotFoundError(condition_id, f'Condition not found: {condition_id}')

    path = f'conditions[{index}]'
    unknown = set(changes) - _CONDITION_MUTABLE_FIELDS
    if unknown:
        msg = f'Condition fields cannot be changed: {", ".join(sorted(unknown))}'
        raise QBConfigurationError(msg, path)
    if 'operator' in changes:
        changes['operator'] = coerce_enum(ConditionOperator, changes['operator'], f'{path}.operator')
    if changes.get('logical_operator'):
        changes['logical_operator'] = coerce_enum(
            LogicalOperator, changes['logical_operator'], f'{path}.logicalOperator'
        )
    elif 'logical_operator' in changes:
        changes['logical_operator'] = None

    conditions = list(config.conditions)
    conditions[index] = replace(conditions[index], **changes)
    return replace(config, conditions=tuple(conditions))


def remove_condition(config: QueryConfiguration, condition_id: str) -> QueryConfiguration:
    """Remove a condition; unknown ids are ignored."""
    return replace(config, conditions=tuple(c for c in config.conditions if c.id != condition_id))


# Subqueries


def new_subquery(number: int) -> Subquery:
    """Empty subquery named after its position in the subquery list (1-based)."""
    return Subquery(name=f'Subquery {number}', alias=f'sub{number}')


def _is_identifier(name: str) -> bool:
    path = parse_column_path(name)
    return path is not None and path.table is None


def add_subquery_condition(
    config: QueryConfiguration,
    subquery: Subquery,
    column: str = 'id',
    select_column: str = 'id',
    operator: ConditionOperator | str = ConditionOperator.IN,
) -> QueryConfiguration:
    """
    Attach a subquery to the main query as an IN / NOT IN condition.

    The condition reads `<column> IN (SELECT <select_column> FROM (<subquery>) <alias>)`.
    The subquery is rendered once, when it is attached; later edits to the
    subquery need to be attached again.

    Args:
        config: Main query configuration
        subquery: Subquery to attach
        column: Column of the main query the subquery filters
        select_column: Column picked from the subquery's derived table
        operator: IN or NOT IN

    Raises:
        QBConfigurationError: If the operator is not a membership test, the
            subquery selects no table, or the alias or select column is not
            a plain identifier
    """
    path = f'conditions[{len(config.conditions)}]'
    operator = coerce_enum(ConditionOperator, operator, f'{path}.operator')
    if operator not in MEMBERSHIP_OPERATORS:
        msg = f'Subqueries are attached with IN or NOT IN, got {operator.value}'
        raise QBConfigurationError(msg, f'{path}.operator')
    if not subquery.config.selected_tables:
        msg = f'Subquery {subquery.name} has no tables'
        raise QBConfigurationError(msg, 'subquery.config.selectedTables')
    if not _is_identifier(subquery.alias):
        msg = f'Subquery alias must be an identifier, got {subquery.alias!r}'
        raise QBConfigurationError(msg, 'subquery.alias')
    if not _is_identifier(select_column):
        msg = f'Subquery column must be an identifier, got {select_column!r}'
        raise QBConfigurationError(msg, 'subquery.selectColumn')

    logger.debug(f'Attaching subquery {subquery.name} as {subquery.alias}')
    return add_condition(config, column, operator, render_subquery(subquery, select_column))


# Grouping, ordering, limit, distinct


def add_group_by(config: QueryConfiguration, column: str) -> QueryConfiguration:
    """Append a GROUP BY path; a path already present is a no-op."""
    if column in config.group_by:
        return config
    return replace(config, group_by=(*config.group_by, column))


def remove_group_by(config: QueryConfiguration, column: str) -> QueryConfiguration:
    """Remove a GROUP BY path."""
    return replace(config, group_by=tuple(path for path in config.group_by if path != column))


def add_order_by(
    config: QueryConfiguration,
    column: str,
    direction: OrderDirection | str = OrderDirection.ASC,
) -> QueryConfiguration:
    """
    Append an ORDER BY entry, or change the direction of an existing one.

    Raises:
        QBConfigurationError: If the direction is unknown
    """
    order = OrderSpec(column=column, direction=coerce_enum(OrderDirection, direction, 'orderBy.direction'))
    if any(existing.column == column for existing in config.order_by):
        return replace(
            config,
            order_by=tuple(order if existing.column == column else existing for existing in config.order_by),
        )
    return replace(config, order_by=(*config.order_by, order))


def remove_order_by(config: QueryConfiguration, column: str) -> QueryConfiguration:
    """Remove the ORDER BY entry for a path."""
    return replace(config, order_by=tuple(order for order in config.order_by if order.column != column))


def set_limit(config: QueryConfiguration, limit: int | None) -> QueryConfiguration:
    """
    Set or clear (None) the row limit.

    Raises:
        QBConfigurationError: If the limit is not a positive integer
    """
    if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0):
        msg = f'Limit must be a positive integer, got {limit!r}'
        raise QBConfigurationError(msg, 'limit')
    return replace(config, limit=limit)


def set_distinct(config: QueryConfiguration, distinct: bool) -> QueryConfiguration:
    """Toggle SELECT DISTINCT."""
    return replace(config, distinct=distinct)
