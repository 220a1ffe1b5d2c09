"""Test cases for configuration to SQL rendering.

Each test case contains:
- name: Unique test case identifier
- config: Configuration in its wire shape (input)
- expected_sql: Expected SQL text (output), exact
- description: Optional description of what is being tested
"""

from typing import Any


def create_test_case(
    name: str,
    config: dict[str, Any],
    expected_sql: str,
    description: str | None = None,
) -> dict[str, Any]:
    """Helper function to create test case dictionary."""
    return {
        'name': name,
        'config': config,
        'expected_sql': expected_sql,
        'description': description,
    }


def _users_where(*conditions: dict[str, Any]) -> dict[str, Any]:
    """Single-table configuration over users with the given conditions."""
    return {
        'selectedTables': [{'schema': '', 'name': 'users'}],
        'conditions': list(conditions),
    }


# SELECT / FROM structure
BASIC_QUERIES = [
    create_test_case(
        name='empty_configuration',
        config={},
        expected_sql='SELECT *',
        description='Nothing selected renders the wildcard and no FROM',
    ),
    create_test_case(
        name='table_without_columns',
        config={'selectedTables': [{'schema': 'public', 'name': 'users'}]},
        expected_sql='SELECT *\nFROM public.users',
        description='Wildcard default when no columns are selected',
    ),
    create_test_case(
        name='distinct_wildcard',
        config={'selectedTables': [{'name': 'users'}], 'distinct': True},
        expected_sql='SELECT DISTINCT *\nFROM users',
    ),
    create_test_case(
        name='columns_one_per_line',
        config={
            'selectedTables': [{'schema': 'public', 'name': 'users'}],
            'selectedColumns': [
                {'tableName': 'users', 'columnName': 'id'},
                {'tableName': 'users', 'columnName': 'email'},
            ],
            'conditions': [{'column': 'public.users.status', 'operator': '=', 'value': 'active'}],
        },
        expected_sql="SELECT\n  users.id,\n  users.email\nFROM public.users\nWHERE status = 'active'",
        description='Single-table query: qualified select list, bare WHERE column',
    ),
    create_test_case(
        name='table_and_column_aliases',
        config={
            'selectedTables': [{'name': 'users', 'alias': 'u'}],
            'selectedColumns': [{'tableName': 'users', 'columnName': 'id', 'alias': 'user_id'}],
        },
        expected_sql='SELECT\n  u.id AS user_id\nFROM users AS u',
        description='Table alias replaces the qualifier; column alias appended',
    ),
    create_test_case(
        name='cartesian_fallback',
        config={'selectedTables': [{'name': 'users'}, {'name': 'orders'}, {'name': 'regions'}]},
        expected_sql='SELECT *\nFROM users\nCROSS JOIN orders\nCROSS JOIN regions',
        description='Tables without joins are combined with CROSS JOIN',
    ),
]

# JOIN rendering
JOIN_QUERIES = [
    create_test_case(
        name='inner_join_with_additional_condition',
        config={
            'selectedTables': [{'name': 'orders'}, {'name': 'users'}],
            'joins': [
                {
                    'joinType': 'INNER',
                    'leftTable': 'orders',
                    'leftColumn': 'user_id',
                    'rightTable': 'users',
                    'rightColumn': 'id',
                    'additionalConditions': [{'leftColumn': 'region', 'rightColumn': 'region'}],
                },
            ],
        },
        expected_sql=(
            'SELECT *\nFROM orders\n'
            'INNER JOIN users ON orders.user_id = users.id AND orders.region = users.region'
        ),
        description='Composite join predicate ANDed into one ON clause',
    ),
    create_test_case(
        name='left_join_with_aliases',
        config={
            'selectedTables': [{'name': 'orders', 'alias': 'o'}, {'name': 'users', 'alias': 'u'}],
            'joins': [
                {
                    'type': 'LEFT',
                    'leftTable': 'orders',
                    'leftColumn': 'user_id',
                    'rightTable': 'users',
                    'rightColumn': 'id',
                },
            ],
        },
        expected_sql='SELECT *\nFROM orders AS o\nLEFT JOIN users AS u ON o.user_id = u.id',
    ),
    create_test_case(
        name='full_join',
        config={
            'selectedTables': [{'name': 'orders'}, {'name': 'users'}],
            'joins': [
                {
                    'joinType': 'FULL',
                    'leftTable': 'orders',
                    'leftColumn': 'user_id',
                    'rightTable': 'users',
                    'rightColumn': 'id',
                },
            ],
        },
        expected_sql='SELECT *\nFROM orders\nFULL OUTER JOIN users ON orders.user_id = users.id',
    ),
    create_test_case(
        name='outer_join',
        config={
            'selectedTables': [{'name': 'orders'}, {'name': 'users'}],
            'joins': [
                {
                    'joinType': 'outer',
                    'leftTable': 'orders',
                    'leftColumn': 'user_id',
                    'rightTable': 'users',
                    'rightColumn': 'id',
                },
            ],
        },
        expected_sql='SELECT *\nFROM orders\nFULL OUTER JOIN users ON orders.user_id = users.id',
        description='OUTER is an alias of FULL OUTER',
    ),
    create_test_case(
        name='join_qualifies_where_columns',
        config={
            'selectedTables': [{'name': 'orders'}, {'name': 'users', 'alias': 'u'}],
            'selectedColumns': [
                {'tableName': 'orders', 'columnName': 'id'},
                {'tableName': 'users', 'columnName': 'name'},
            ],
            'joins': [
                {
                    'joinType': 'INNER',
                    'leftTable': 'orders',
                    'leftColumn': 'user_id',
                    'rightTable': 'u',
                    'rightColumn': 'id',
                },
            ],
            'conditions': [{'column': 'users.status', 'operator': '=', 'value': 'active'}],
            'orderBy': [{'column': 'orders.id', 'direction': 'DESC'}],
        },
        expected_sql=(
            'SELECT\n  orders.id,\n  u.name\nFROM orders\n'
            'INNER JOIN users AS u ON orders.user_id = u.id\n'
            "WHERE u.status = 'active'\n"
            'ORDER BY orders.id DESC'
        ),
        description='Multi-table paths render table.column, through the alias',
    ),
]

# Aggregate functions, grouping, ordering, limit
AGGREGATE_QUERIES = [
    create_test_case(
        name='count_sum_group_order_limit',
        config={
            'selectedTables': [{'name': 'orders'}],
            'selectedColumns': [
                {'tableName': 'orders', 'columnName': 'region'},
                {'tableName': 'orders', 'columnName': '*', 'aggregateFunction': 'COUNT', 'alias': 'order_count'},
                {'tableName': 'orders', 'columnName': 'total', 'aggregateFunction': 'SUM', 'alias': 'total_sum'},
            ],
            'groupBy': ['orders.region'],
            'orderBy': [{'column': 'total_sum', 'direction': 'DESC'}],
            'limit': 10,
        },
        expected_sql=(
            'SELECT\n  orders.region,\n  COUNT(*) AS order_count,\n  SUM(orders.total) AS total_sum\n'
            'FROM orders\nGROUP BY region\nORDER BY total_sum DESC\nLIMIT 10'
        ),
    ),
    create_test_case(
        name='count_column',
        config={
            'selectedTables': [{'name': 'users'}],
            'selectedColumns': [{'tableName': 'users', 'columnName': 'email', 'function': 'count'}],
        },
        expected_sql='SELECT\n  COUNT(users.email)\nFROM users',
        description='UI key "function" and lower-case names are accepted',
    ),
    create_test_case(
        name='date_functions',
        config={
            'selectedTables': [{'name': 'orders'}],
            'selectedColumns': [
                {'tableName': 'orders', 'columnName': 'created_at', 'aggregateFunction': 'DATE_TRUNC', 'alias': 'day'},
                {'tableName': 'orders', 'columnName': 'shipped_at', 'aggregateFunction': 'EXTRACT'},
            ],
        },
        expected_sql=(
            "SELECT\n  DATE_TRUNC('day', orders.created_at) AS day,\n"
            '  EXTRACT(year FROM orders.shipped_at)\nFROM orders'
        ),
    ),
    create_test_case(
        name='string_functions',
        config={
            'selectedTables': [{'name': 'users'}],
            'selectedColumns': [
                {'tableName': 'users', 'columnName': 'name', 'aggregateFunction': 'UPPER'},
                {'tableName': 'users', 'columnName': 'email', 'aggregateFunction': 'LENGTH', 'alias': 'email_len'},
            ],
        },
        expected_sql='SELECT\n  UPPER(users.name),\n  LENGTH(users.email) AS email_len\nFROM users',
    ),
    create_test_case(
        name='non_positive_limit_ignored',
        config={'selectedTables': [{'name': 'users'}], 'limit': 0},
        expected_sql='SELECT *\nFROM users',
    ),
    create_test_case(
        name='empty_order_by_skipped',
        config={
            'selectedTables': [{'name': 'users'}],
            'orderBy': [{'column': '', 'direction': 'ASC'}, {'column': 'users.name', 'direction': 'ASC'}],
        },
        expected_sql='SELECT *\nFROM users\nORDER BY name ASC',
    ),
]

# WHERE value formatting per operator
CONDITION_QUERIES = [
    create_test_case(
        name='numeric_value_unquoted',
        config=_users_where({'column': 'users.id', 'operator': '>', 'value': '18'}),
        expected_sql='SELECT *\nFROM users\nWHERE id > 18',
    ),
    create_test_case(
        name='decimal_value_unquoted',
        config=_users_where({'column': 'users.score', 'operator': '<=', 'value': '3.5'}),
        expected_sql='SELECT *\nFROM users\nWHERE score <= 3.5',
    ),
    create_test_case(
        name='embedded_quote_doubled',
        config=_users_where({'column': 'users.name', 'operator': '=', 'value': "O'Brien"}),
        expected_sql="SELECT *\nFROM users\nWHERE name = 'O''Brien'",
    ),
    create_test_case(
        name='already_quoted_kept',
        config=_users_where({'column': 'users.name', 'operator': '!=', 'value': "'Bob'"}),
        expected_sql="SELECT *\nFROM users\nWHERE name != 'Bob'",
    ),
    create_test_case(
        name='in_list_wrapped',
        config=_users_where({'column': 'users.id', 'operator': 'IN', 'value': '1, 2, 3'}),
        expected_sql='SELECT *\nFROM users\nWHERE id IN (1, 2, 3)',
    ),
    create_test_case(
        name='not_in_already_wrapped',
        config=_users_where({'column': 'users.status', 'operator': 'NOT IN', 'value': "('a', 'b')"}),
        expected_sql="SELECT *\nFROM users\nWHERE status NOT IN ('a', 'b')",
    ),
    create_test_case(
        name='like_quoted',
        config=_users_where({'column': 'users.name', 'operator': 'LIKE', 'value': 'A%'}),
        expected_sql="SELECT *\nFROM users\nWHERE name LIKE 'A%'",
    ),
    create_test_case(
        name='like_numeric_pattern_quoted',
        config=_users_where({'column': 'users.zip', 'operator': 'NOT LIKE', 'value': '12%'}),
        expected_sql="SELECT *\nFROM users\nWHERE zip NOT LIKE '12%'",
    ),
    create_test_case(
        name='ilike_already_quoted',
        config=_users_where({'column': 'users.name', 'operator': 'ILIKE', 'value': "'a%'"}),
        expected_sql="SELECT *\nFROM users\nWHERE name ILIKE 'a%'",
    ),
    create_test_case(
        name='is_null_ignores_value',
        config=_users_where({'column': 'users.email', 'operator': 'IS NULL', 'value': 'ignored'}),
        expected_sql='SELECT *\nFROM users\nWHERE email IS NULL',
    ),
    create_test_case(
        name='is_not_null',
        config=_users_where({'column': 'users.email', 'operator': 'IS NOT NULL'}),
        expected_sql='SELECT *\nFROM users\nWHERE email IS NOT NULL',
    ),
    create_test_case(
        name='between_numbers',
        config=_users_where({'column': 'users.id', 'operator': 'BETWEEN', 'value': '1 AND 10'}),
        expected_sql='SELECT *\nFROM users\nWHERE id BETWEEN 1 AND 10',
    ),
    create_test_case(
        name='not_between_dates',
        config=_users_where(
            {'column': 'users.created_at', 'operator': 'NOT BETWEEN', 'value': "'2024-01-01' and 2024-12-31"},
        ),
        expected_sql="SELECT *\nFROM users\nWHERE created_at NOT BETWEEN '2024-01-01' AND '2024-12-31'",
    ),
    create_test_case(
        name='empty_value_renders_operator_only',
        config=_users_where({'column': 'users.name', 'operator': '=', 'value': ''}),
        expected_sql='SELECT *\nFROM users\nWHERE name =',
    ),
    create_test_case(
        name='logical_operators_in_order',
        config=_users_where(
            {'column': 'users.status', 'operator': '=', 'value': 'active'},
            {'column': 'users.region', 'operator': '=', 'value': 'eu', 'logicalOperator': 'OR'},
            {'column': 'users.id', 'operator': '<>', 'value': '2'},
        ),
        expected_sql="SELECT *\nFROM users\nWHERE status = 'active' OR region = 'eu' AND id <> 2",
        description='Missing logical operator defaults to AND; no grouping',
    ),
    create_test_case(
        name='first_logical_operator_ignored',
        config=_users_where({'column': 'users.id', 'operator': '=', 'value': '1', 'logicalOperator': 'OR'}),
        expected_sql='SELECT *\nFROM users\nWHERE id = 1',
    ),
    create_test_case(
        name='blank_column_skipped',
        config=_users_where(
            {'column': '', 'operator': '=', 'value': 'x'},
            {'column': 'users.id', 'operator': '=', 'value': '1'},
        ),
        expected_sql='SELECT *\nFROM users\nWHERE id = 1',
    ),
    create_test_case(
        name='expression_path_verbatim',
        config=_users_where({'column': 'lower(users.name)', 'operator': '=', 'value': 'bob'}),
        expected_sql="SELECT *\nFROM users\nWHERE lower(users.name) = 'bob'",
    ),
]

# All test cases combined
GENERATOR_TEST_CASES = BASIC_QUERIES + JOIN_QUERIES + AGGREGATE_QUERIES + CONDITION_QUERIES
