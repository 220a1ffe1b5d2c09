"""Tests for data model types and their wire representation."""

import pytest

from namerec.qbuilder.constants import SQL_FUNCTIONS
from namerec.qbuilder.constants import SQL_OPERATORS
from namerec.qbuilder.constants import AggregateFunction
from namerec.qbuilder.constants import ConditionOperator
from namerec.qbuilder.constants import JoinType
from namerec.qbuilder.constants import LogicalOperator
from namerec.qbuilder.exceptions import QBConfigurationError
from namerec.qbuilder.types import JoinSpec
from namerec.qbuilder.types import QueryConfiguration
from namerec.qbuilder.types import QueryResult
from namerec.qbuilder.types import SelectedColumn
from namerec.qbuilder.types import Subquery
from namerec.qbuilder.types import TableRef
from namerec.qbuilder.utils import form_column_path
from namerec.qbuilder.utils import parse_column_path

WIRE_CONFIG = {
    'selectedTables': [{'schema': 'public', 'name': 'orders', 'alias': 'o'}, {'schema': 'public', 'name': 'users'}],
    'selectedColumns': [
        {'tableName': 'orders', 'columnName': 'total', 'schema': 'public', 'aggregateFunction': 'SUM', 'alias': 's'},
    ],
    'joins': [
        {
            'id': 'join_1',
            'type': 'left',
            'leftTable': 'o',
            'leftColumn': 'user_id',
            'rightTable': 'public.users',
            'rightColumn': 'id',
            'additionalConditions': [{'id': 'jc_1', 'leftColumn': 'region', 'rightColumn': 'region'}],
        },
    ],
    'conditions': [
        {'id': 'c_1', 'column': 'users.status', 'operator': '=', 'value': 'active'},
        {'id': 'c_2', 'column': 'orders.total', 'operator': 'between', 'value': 5, 'logicalOperator': 'or'},
    ],
    'groupBy': ['users.region'],
    'orderBy': [{'column': 's', 'direction': 'desc'}],
    'limit': '25',
    'distinct': True,
}


class TestQueryConfigurationWire:
    """Conversion between the UI wire shape and dataclasses."""

    def test_from_dict(self):
        """camelCase keys, UI aliases and lower-case enum values are accepted."""
        config = QueryConfiguration.from_dict(WIRE_CONFIG)

        assert config.anchor_table == TableRef(name='orders', schema='public', alias='o')
        assert config.selected_columns[0].aggregate_function is AggregateFunction.SUM
        assert config.joins[0].join_type is JoinType.LEFT
        assert config.joins[0].additional_conditions[0].id == 'jc_1'
        assert config.conditions[1].operator is ConditionOperator.BETWEEN
        assert config.conditions[1].logical_operator is LogicalOperator.OR
        assert config.conditions[1].value == '5'
        assert config.limit == 25
        assert config.distinct is True

    def test_snake_case_keys(self):
        """Python callers may use snake_case keys."""
        config = QueryConfiguration.from_dict({
            'selected_tables': ['public.users'],
            'selected_columns': [{'table_name': 'users', 'column_name': 'id', 'aggregate_function': 'count'}],
            'group_by': ['users.id'],
        })

        assert config.selected_tables == (TableRef(name='users', schema='public'),)
        assert config.selected_columns[0].aggregate_function is AggregateFunction.COUNT
        assert config.group_by == ('users.id',)

    def test_to_dict_round_trip(self):
        """to_dict output loads back into an equal configuration."""
        config = QueryConfiguration.from_dict(WIRE_CONFIG)
        assert QueryConfiguration.from_dict(config.to_dict()) == config
        assert QueryConfiguration.from_json(config.to_json()) == config

    def test_to_dict_shape(self):
        """Wire keys are camelCase, enums are plain values."""
        data = QueryConfiguration.from_dict(WIRE_CONFIG).to_dict()

        assert data['selectedColumns'][0] == {
            'id': 'public.orders.total',
            'schema': 'public',
            'tableName': 'orders',
            'columnName': 'total',
            'alias': 's',
            'aggregateFunction': 'SUM',
        }
        assert data['joins'][0]['joinType'] == 'LEFT'
        assert data['orderBy'] == [{'column': 's', 'direction': 'DESC'}]
        assert data['limit'] == 25

    def test_missing_ids_generated(self):
        """Joins and conditions without ids get fresh ones."""
        config = QueryConfiguration.from_dict({'conditions': [{'column': 'a'}, {'column': 'b'}]})
        first, second = config.conditions
        assert first.id.startswith('condition_')
        assert first.id != second.id

    def test_unknown_operator_reports_path(self):
        """Enum errors name the offending field."""
        with pytest.raises(QBConfigurationError) as exc_info:
            QueryConfiguration.from_dict({'conditions': [{'column': 'a'}, {'column': 'b', 'operator': '=='}]})
        assert exc_info.value.path == 'conditions[1].operator'
        assert 'NOT BETWEEN' in str(exc_info.value)

    def test_unknown_join_type(self):
        """Join types come from the fixed set."""
        with pytest.raises(QBConfigurationError):
            JoinSpec.from_dict({'joinType': 'NATURAL'})


class TestSubquery:
    """Subquery wire form."""

    def test_round_trip(self):
        """Nested configuration survives the wire form."""
        subquery = Subquery(
            name='Subquery 1',
            alias='sub1',
            config=QueryConfiguration(
                selected_tables=(TableRef(name='orders'),),
                selected_columns=(SelectedColumn(table_name='orders', column_name='user_id'),),
            ),
        )

        data = subquery.to_dict()

        assert data['config']['selectedTables'][0]['name'] == 'orders'
        assert Subquery.from_dict(data) == subquery

    def test_defaults(self):
        """Missing fields get empty values and a fresh id."""
        subquery = Subquery.from_dict({'alias': 's'})

        assert subquery.name == ''
        assert subquery.config == QueryConfiguration()
        assert subquery.id.startswith('subquery')


class TestTableRef:
    """Table references."""

    def test_references(self):
        """A table can be referred to by name, schema.name or alias."""
        table = TableRef(name='users', schema='public', alias='u')
        assert table.references == frozenset({'users', 'public.users', 'u'})

    def test_from_string(self):
        """Bare strings are parsed as [schema.]name."""
        assert TableRef.from_dict('users') == TableRef(name='users')
        assert TableRef.from_dict('public.users') == TableRef(name='users', schema='public')

    def test_empty_alias_is_none(self):
        """Empty alias on the wire means no alias."""
        assert TableRef.from_dict({'name': 'users', 'alias': ''}).alias is None

    def test_select_column_from_ui_function_key(self):
        """The UI sends the aggregate as 'function'."""
        column = SelectedColumn.from_dict({'tableName': 't', 'columnName': 'c', 'function': 'avg'})
        assert column.aggregate_function is AggregateFunction.AVG


class TestQueryResult:
    """Result paging and CSV export."""

    @pytest.fixture
    def result(self) -> QueryResult:
        """Five rows."""
        return QueryResult(columns=['id', 'name'], rows=[[i, f'user{i}'] for i in range(1, 6)])

    def test_page(self, result):
        """Pages are 1-based; the last page may be short."""
        assert result.page(1, 2).rows == [[1, 'user1'], [2, 'user2']]
        assert result.page(3, 2).rows == [[5, 'user5']]
        assert result.page(4, 2).rows == []
        assert result.page(1, 2).columns == ['id', 'name']

    @pytest.mark.parametrize(('page', 'page_size'), [(0, 10), (1, 0), (-1, 5)])
    def test_page_invalid(self, result, page, page_size):
        """Page and page size must be positive."""
        with pytest.raises(ValueError):
            result.page(page, page_size)

    def test_to_csv(self):
        """Header row, NULL as empty cell, values with commas and quotes escaped."""
        result = QueryResult(columns=['id', 'name', 'note'], rows=[[1, 'Smith, J', None], [2, 'say "hi"', 'x']])
        assert result.to_csv() == 'id,name,note\n1,"Smith, J",\n2,"say ""hi""",x\n'

    def test_to_dict(self, result):
        """Wire shape."""
        assert result.to_dict() == {'columns': ['id', 'name'], 'rows': result.rows}
        assert result.row_count == 5


class TestColumnPaths:
    """Column path parsing."""

    @pytest.mark.parametrize(
        ('path', 'expected'),
        [
            ('status', (None, None, 'status')),
            ('users.status', (None, 'users', 'status')),
            ('public.users.status', ('public', 'users', 'status')),
        ],
    )
    def test_parse(self, path, expected):
        """Up to three dotted identifier segments."""
        parsed = parse_column_path(path)
        assert (parsed.schema, parsed.table, parsed.column) == expected

    @pytest.mark.parametrize('path', ['lower(name)', 'a.b.c.d', "users.name || 'x'", ''])
    def test_expressions_not_parsed(self, path):
        """Anything but an identifier path is an expression."""
        assert parse_column_path(path) is None

    def test_form(self):
        """Inverse of parsing."""
        assert form_column_path('users', 'id') == 'users.id'
        assert form_column_path('users', 'id', 'public') == 'public.users.id'


def test_function_catalog():
    """Every aggregate function is described for the UI."""
    assert {spec.name for spec in SQL_FUNCTIONS} == {function.value for function in AggregateFunction}
    count = next(spec for spec in SQL_FUNCTIONS if spec.name == 'COUNT')
    assert count.params == ('*', 'column')
    assert count.to_dict() == {'name': 'COUNT', 'params': ['*', 'column'], 'description': count.description}


def test_operator_catalog():
    """Operator list offered to the UI follows the enum."""
    assert len(SQL_OPERATORS) == 17
    assert SQL_OPERATORS[:3] == ('=', '!=', '<>')
    assert 'NOT BETWEEN' in SQL_OPERATORS
