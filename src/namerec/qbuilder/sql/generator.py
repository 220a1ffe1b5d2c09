"""
QueryConfiguration to SQL rendering.

Rendering is a pure function of the configuration snapshot: no I/O, no state,
and no exceptions for partially built configurations. Clauses are always
emitted in the order SELECT, FROM, JOIN, WHERE, GROUP BY, ORDER BY, LIMIT and
empty clauses are omitted.

Cartesian fallback: when more than one table is selected and no joins are
defined, every table after the anchor is added with CROSS JOIN so the query
stays renderable. That produces a full Cartesian product; callers should
prompt the user to define joins before executing such a query.
"""

import logging
import re
from dataclasses import replace
from typing import Any

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from namerec.qbuilder.constants import DATE_TRUNC_PRECISION
from namerec.qbuilder.constants import EXTRACT_PART
from namerec.qbuilder.constants import MEMBERSHIP_OPERATORS
from namerec.qbuilder.constants import RANGE_OPERATORS
from namerec.qbuilder.constants import WILDCARD
from namerec.qbuilder.constants import AggregateFunction
from namerec.qbuilder.constants import ConditionOperator
from namerec.qbuilder.constants import JoinType
from namerec.qbuilder.constants import LogicalOperator
from namerec.qbuilder.exceptions import QBConfigurationError
from namerec.qbuilder.sql.clauses import Clause
from namerec.qbuilder.sql.clauses import ClauseKind
from namerec.qbuilder.sql.clauses import Statement
from namerec.qbuilder.sql.literals import format_condition_value
from namerec.qbuilder.sql.literals import is_literal_list
from namerec.qbuilder.sql.literals import parse_condition_value
from namerec.qbuilder.types import JoinSpec
from namerec.qbuilder.types import QueryCondition
from namerec.qbuilder.types import QueryConfiguration
from namerec.qbuilder.types import SelectedColumn
from namerec.qbuilder.types import Subquery
from namerec.qbuilder.types import TableRef
from namerec.qbuilder.utils import parse_column_path

logger = logging.getLogger(__name__)

# Dialect the preview text is written in, used as the transpile source.
PREVIEW_DIALECT = 'postgres'

_PLACEHOLDER_RE = re.compile(r':(p\d+)\b')


class _ParamAllocator:
    """Hands out sequential bind parameter names and collects their values."""

    def __init__(self) -> None:
        self.params: dict[str, Any] = {}

    def bind(self, value: Any) -> str:
        name = f'p{len(self.params) + 1}'
        self.params[name] = value
        return f':{name}'


def _coerce_function(value: Any) -> AggregateFunction | None:
    if value is None or isinstance(value, AggregateFunction):
        return value
    try:
        return AggregateFunction(str(value).upper())
    except ValueError:
        logger.debug(f'Ignoring unknown aggregate function: {value}')
        return None


def _coerce_operator(value: Any) -> ConditionOperator | None:
    if isinstance(value, ConditionOperator):
        return value
    try:
        return ConditionOperator(str(value).strip().upper())
    except ValueError:
        return None


def _find_table(config: QueryConfiguration, reference: str, schema: str = '') -> TableRef | None:
    for table in config.selected_tables:
        if reference in table.references and (not schema or schema == table.schema):
            return table
    return None


def _qualifier(config: QueryConfiguration, reference: str, schema: str = '') -> str:
    """Name a column is qualified with: the table's alias when it has one."""
    table = _find_table(config, reference, schema)
    return table.alias if table and table.alias else reference


def render_table(table: TableRef) -> str:
    """Render a FROM / CROSS JOIN target."""
    return f'{table.qualified_name} AS {table.alias}' if table.alias else table.qualified_name


def render_column(column: SelectedColumn, qualifier: str | None = None) -> str:
    """
    Render one SELECT list entry.

    Args:
        column: Selected column
        qualifier: Table qualifier to use instead of the column's table name

    Returns:
        Column expression wrapped by its aggregate function, with alias
    """
    table = qualifier if qualifier is not None else column.table_name
    expr = f'{table}.{column.column_name}' if table else column.column_name

    match _coerce_function(column.aggregate_function):
        case AggregateFunction.DATE_TRUNC:
            expr = f"DATE_TRUNC('{DATE_TRUNC_PRECISION}', {expr})"
        case AggregateFunction.EXTRACT:
            expr = f'EXTRACT({EXTRACT_PART} FROM {expr})'
        case AggregateFunction.COUNT:
            expr = 'COUNT(*)' if column.column_name == WILDCARD else f'COUNT({expr})'
        case None:
            pass
        case function:
            expr = f'{function.value}({expr})'

    if column.alias:
        expr += f' AS {column.alias}'
    return expr


def render_path(config: QueryConfiguration, path: str, qualify: bool) -> str:
    """
    Render a column path used by WHERE, GROUP BY and ORDER BY.

    Identifier paths ('schema.table.column') render as the bare column when the
    query reads a single table and as 'table.column' otherwise. Anything that
    is not a plain identifier path (expressions, casts) is rendered verbatim.
    """
    parsed = parse_column_path(path)
    if parsed is None:
        return path.strip()
    if not qualify or parsed.table is None:
        return parsed.column
    return f'{_qualifier(config, parsed.table, parsed.schema or "")}.{parsed.column}'


def _needs_qualification(config: QueryConfiguration) -> bool:
    return len(config.selected_tables) > 1 or bool(config.joins)


def _select_clause(config: QueryConfiguration) -> Clause:
    keyword = 'SELECT DISTINCT' if config.distinct else 'SELECT'
    if not config.selected_columns:
        return Clause(ClauseKind.SELECT, keyword, (WILDCARD,))
    items = tuple(
        render_column(column, _qualifier(config, column.table_name, column.schema))
        for column in config.selected_columns
    )
    return Clause(ClauseKind.SELECT, keyword, items, multiline=True)


def _from_clauses(config: QueryConfiguration) -> list[Clause]:
    if not config.selected_tables:
        return []
    anchor, *rest = config.selected_tables
    clauses = [Clause(ClauseKind.FROM, 'FROM', (render_table(anchor),))]
    if rest and not config.joins:
        logger.debug(f'No joins defined, combining {len(rest)} tables with CROSS JOIN')
        clauses.extend(Clause(ClauseKind.JOIN, 'CROSS JOIN', (render_table(table),)) for table in rest)
    return clauses


def _coerce_join_type(value: Any) -> JoinType:
    if isinstance(value, JoinType):
        return value
    try:
        return JoinType(str(value).strip().upper())
    except ValueError:
        return JoinType.INNER


def _render_join(config: QueryConfiguration, join: JoinSpec) -> Clause:
    join_type = _coerce_join_type(join.join_type)
    right_table = _find_table(config, join.right_table)
    target = render_table(right_table) if right_table else join.right_table

    left = _qualifier(config, join.left_table)
    right = _qualifier(config, join.right_table)
    predicates = [f'{left}.{join.left_column} = {right}.{join.right_column}']
    predicates.extend(
        f'{left}.{cond.left_column} = {right}.{cond.right_column}' for cond in join.additional_conditions
    )
    return Clause(ClauseKind.JOIN, f'{join_type.keyword} JOIN', (f'{target} ON ' + ' AND '.join(predicates),))


def _render_condition_value(
    condition: QueryCondition,
    operator: ConditionOperator | None,
    allocator: _ParamAllocator | None,
) -> str | None:
    if allocator is None or operator is None:
        return format_condition_value(operator, condition.value)
    if operator in MEMBERSHIP_OPERATORS and not is_literal_list(condition.value):
        # Subqueries and column lists are SQL, not values
        logger.debug(f'Keeping {operator.value} value of {condition.column} inline')
        return format_condition_value(operator, condition.value)

    values = parse_condition_value(operator, condition.value)
    if not values:
        return None
    placeholders = [allocator.bind(value) for value in values]
    if operator in MEMBERSHIP_OPERATORS:
        return f'({", ".join(placeholders)})'
    if operator in RANGE_OPERATORS and len(placeholders) == 2:
        return ' AND '.join(placeholders)
    return placeholders[0]


def _where_clause(config: QueryConfiguration, qualify: bool, allocator: _ParamAllocator | None) -> Clause | None:
    fragments: list[str] = []
    for condition in config.conditions:
        if not condition.column.strip():
            continue

        operator = _coerce_operator(condition.operator)
        operator_text = operator.value if operator else str(condition.operator)
        fragment = f'{render_path(config, condition.column, qualify)} {operator_text}'
        value = _render_condition_value(condition, operator, allocator)
        if value:
            fragment += f' {value}'

        if fragments:
            logical = condition.logical_operator or LogicalOperator.AND
            fragment = f'{getattr(logical, "value", logical)} {fragment}'
        fragments.append(fragment)

    if not fragments:
        return None
    return Clause(ClauseKind.WHERE, 'WHERE', tuple(fragments), separator=' ')


def _group_by_clause(config: QueryConfiguration, qualify: bool) -> Clause | None:
    items = tuple(render_path(config, path, qualify) for path in config.group_by if path.strip())
    return Clause(ClauseKind.GROUP_BY, 'GROUP BY', items) if items else None


def _order_by_clause(config: QueryConfiguration, qualify: bool) -> Clause | None:
    items = tuple(
        f'{render_path(config, order.column, qualify)} {getattr(order.direction, "value", order.direction)}'
        for order in config.order_by
        if order.column and order.column.strip()
    )
    return Clause(ClauseKind.ORDER_BY, 'ORDER BY', items) if items else None


def _limit_clause(config: QueryConfiguration) -> Clause | None:
    limit = config.limit
    if isinstance(limit, int) and not isinstance(limit, bool) and limit > 0:
        return Clause(ClauseKind.LIMIT, 'LIMIT', (str(limit),))
    return None


def build_statement(config: QueryConfiguration, parameterized: bool = False) -> Statement:
    """
    Build the clause tree for a configuration.

    Args:
        config: Configuration snapshot
        parameterized: Keep WHERE literals out of the text as bind parameters

    Returns:
        Statement with clauses in fixed order (and bind values when parameterized)
    """
    allocator = _ParamAllocator() if parameterized else None
    qualify = _needs_qualification(config)

    clauses: list[Clause | None] = [
        _select_clause(config),
        *_from_clauses(config),
        *(_render_join(config, join) for join in config.joins),
        _where_clause(config, qualify, allocator),
        _group_by_clause(config, qualify),
        _order_by_clause(config, qualify),
        _limit_clause(config),
    ]
    return Statement(
        clauses=tuple(clause for clause in clauses if clause is not None),
        params=allocator.params if allocator else {},
    )


def _keep_named_placeholder(node: exp.Expression) -> exp.Expression:
    # Dialects spell named parameters differently (%(p1)s, $p1, @p1);
    # the executor binds ':name' through SQLAlchemy text()
    if isinstance(node, exp.Placeholder) and node.this:
        return exp.Var(this=f':{node.name}')
    return node


def transpile_sql(sql: str, dialect: str | None) -> str:
    """
    Rewrite generic query text for a target dialect.

    Named ':name' placeholders are kept as written. Text sqlglot cannot
    parse is returned unchanged.

    Args:
        sql: Text in the preview dialect
        dialect: sqlglot dialect name; None or the preview dialect is a no-op

    Returns:
        Text in the target dialect
    """
    if not dialect or dialect == PREVIEW_DIALECT:
        return sql

    try:
        expression = sqlglot.parse_one(sql, read=PREVIEW_DIALECT)
        return expression.transform(_keep_named_placeholder).sql(dialect=dialect, pretty=True)
    except SqlglotError as e:
        logger.warning(f'Could not transpile to {dialect}, returning untranslated text: {e}')
        return sql


def generate_sql(config: QueryConfiguration, dialect: str | None = None) -> str:
    """
    Render a configuration as human-readable SQL text.

    Args:
        config: Configuration snapshot
        dialect: Optional sqlglot dialect to transpile the preview into (e.g. 'mysql', 'duckdb')

    Returns:
        SQL text, clauses separated by newlines

    Example:
        >>> config = QueryConfiguration(
        ...     selected_tables=(TableRef(name='users', schema='public'),),
        ...     selected_columns=(SelectedColumn(table_name='users', column_name='id'),),
        ... )
        >>> print(generate_sql(config))
        SELECT
          users.id
        FROM public.users
    """
    sql = build_statement(config).text
    logger.debug(f'Generated SQL:\n{sql}')
    return transpile_sql(sql, dialect)


def generate_parameterized(config: QueryConfiguration, dialect: str | None = None) -> Statement:
    """
    Render a configuration for execution, with WHERE literals as bind parameters.

    Args:
        config: Configuration snapshot
        dialect: Optional sqlglot dialect, the same one the preview was rendered in

    Returns:
        Statement whose text uses ':pN' placeholders and whose params hold the typed values

    Raises:
        QBConfigurationError: If transpiling to the dialect drops a placeholder

    Example:
        >>> config = QueryConfiguration(
        ...     selected_tables=(TableRef(name='users'),),
        ...     conditions=(QueryCondition(column='users.status', value='active'),),
        ... )
        >>> statement = generate_parameterized(config)
        >>> statement.text.splitlines()[-1], statement.params
        ('WHERE status = :p1', {'p1': 'active'})
    """
    statement = build_statement(config, parameterized=True)
    if dialect and dialect != PREVIEW_DIALECT:
        sql = transpile_sql(statement.text, dialect)
        missing = sorted(set(statement.params) - set(_PLACEHOLDER_RE.findall(sql)))
        if missing:
            msg = f'Bind parameters lost when rendering for {dialect}: {", ".join(missing)}'
            raise QBConfigurationError(msg, 'dialect')
        statement = replace(statement, transpiled=sql)

    logger.debug(f'Generated parameterized SQL:\n{statement.text}\nparams={statement.params}')
    return statement


def render_subquery(subquery: Subquery, select_column: str = 'id') -> str:
    """
    Render a subquery as the value of an IN condition.

    The nested configuration goes through the same clause tree as the main
    query, on one line and with inline literals.

    Args:
        subquery: Subquery definition
        select_column: Column the outer SELECT picks from the derived table

    Returns:
        '(SELECT <select_column> FROM (<nested query>) <alias>)'

    Example:
        >>> sub = Subquery(name='Buyers', alias='sub1', config=QueryConfiguration(
        ...     selected_tables=(TableRef(name='orders'),),
        ...     selected_columns=(SelectedColumn(table_name='orders', column_name='user_id', alias='id'),),
        ... ))
        >>> render_subquery(sub)
        '(SELECT id FROM (SELECT orders.user_id AS id FROM orders) sub1)'
    """
    inner = build_statement(subquery.config).inline_text
    return f'(SELECT {select_column} FROM ({inner}) {subquery.alias})'
