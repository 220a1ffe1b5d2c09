"""
QBuilder - visual query builder core

Build SELECT queries from a structured configuration (tables, columns, joins,
conditions, grouping, ordering), render them as SQL and screen SQL text before
it reaches the database.
"""

from namerec.qbuilder.constants import AggregateFunction
from namerec.qbuilder.constants import ConditionOperator
from namerec.qbuilder.constants import JoinType
from namerec.qbuilder.constants import LogicalOperator
from namerec.qbuilder.constants import OrderDirection
from namerec.qbuilder.exceptions import QBConfigurationError
from namerec.qbuilder.exceptions import QBError
from namerec.qbuilder.exceptions import QBExecutionError
from namerec.qbuilder.exceptions import QBNotFoundError
from namerec.qbuilder.exceptions import QBValidationError
from namerec.qbuilder.executor import QueryExecutor
from namerec.qbuilder.executor import SQLAlchemyQueryExecutor
from namerec.qbuilder.saved import MemorySavedQueryStore
from namerec.qbuilder.saved import SavedQuery
from namerec.qbuilder.schema import ColumnCache
from namerec.qbuilder.schema import SchemaIntrospector
from namerec.qbuilder.service import QueryBuilderService
from namerec.qbuilder.sql import Statement
from namerec.qbuilder.sql import generate_parameterized
from namerec.qbuilder.sql import generate_sql
from namerec.qbuilder.sql import render_subquery
from namerec.qbuilder.sql import is_select_statement
from namerec.qbuilder.sql import validate_sql
from namerec.qbuilder.types import ColumnInfo
from namerec.qbuilder.types import JoinCondition
from namerec.qbuilder.types import JoinSpec
from namerec.qbuilder.types import OrderSpec
from namerec.qbuilder.types import QueryCondition
from namerec.qbuilder.types import QueryConfiguration
from namerec.qbuilder.types import QueryResult
from namerec.qbuilder.types import SelectedColumn
from namerec.qbuilder.types import Subquery
from namerec.qbuilder.types import TableInfo
from namerec.qbuilder.types import TableRef
from namerec.qbuilder.types import ValidationResult

__version__ = '1.0'

__all__ = [
    # Enums
    'AggregateFunction',
    'ConditionOperator',
    'JoinType',
    'LogicalOperator',
    'OrderDirection',
    # Data model
    'TableRef',
    'SelectedColumn',
    'JoinCondition',
    'JoinSpec',
    'QueryCondition',
    'OrderSpec',
    'QueryConfiguration',
    'Subquery',
    'ValidationResult',
    'QueryResult',
    'ColumnInfo',
    'TableInfo',
    # Exceptions
    'QBError',
    'QBConfigurationError',
    'QBValidationError',
    'QBExecutionError',
    'QBNotFoundError',
    # Generation and validation
    'Statement',
    'generate_sql',
    'generate_parameterized',
    'render_subquery',
    'validate_sql',
    'is_select_statement',
    # Execution
    'QueryExecutor',
    'SQLAlchemyQueryExecutor',
    'SchemaIntrospector',
    'ColumnCache',
    # Saved queries and service
    'SavedQuery',
    'MemorySavedQueryStore',
    'QueryBuilderService',
]
