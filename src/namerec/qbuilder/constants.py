"""Constants for the query builder to avoid magic strings."""

from dataclasses import dataclass
from enum import Enum


class AggregateFunction(str, Enum):
    """Functions a selected column can be rendered through."""

    COUNT = 'COUNT'
    SUM = 'SUM'
    AVG = 'AVG'
    MIN = 'MIN'
    MAX = 'MAX'
    DATE_TRUNC = 'DATE_TRUNC'
    EXTRACT = 'EXTRACT'
    UPPER = 'UPPER'
    LOWER = 'LOWER'
    LENGTH = 'LENGTH'


class ConditionOperator(str, Enum):
    """Comparison operators accepted in WHERE conditions."""

    EQ = '='
    NE = '!='
    NEQ_ISO = '<>'  # ISO standard not-equal operator
    LT = '<'
    GT = '>'
    LE = '<='
    GE = '>='
    LIKE = 'LIKE'
    ILIKE = 'ILIKE'
    NOT_LIKE = 'NOT LIKE'
    NOT_ILIKE = 'NOT ILIKE'
    IN = 'IN'
    NOT_IN = 'NOT IN'
    IS_NULL = 'IS NULL'
    IS_NOT_NULL = 'IS NOT NULL'
    BETWEEN = 'BETWEEN'
    NOT_BETWEEN = 'NOT BETWEEN'


class LogicalOperator(str, Enum):
    """Connectors between consecutive conditions."""

    AND = 'AND'
    OR = 'OR'


class JoinType(str, Enum):
    """SQL join types."""

    INNER = 'INNER'
    LEFT = 'LEFT'
    RIGHT = 'RIGHT'
    OUTER = 'OUTER'
    FULL = 'FULL'
    CROSS = 'CROSS'

    @property
    def keyword(self) -> str:
        """Keyword rendered in front of JOIN."""
        if self in (JoinType.OUTER, JoinType.FULL):
            return 'FULL OUTER'
        return self.value


class OrderDirection(str, Enum):
    """SQL order directions."""

    ASC = 'ASC'
    DESC = 'DESC'


@dataclass(frozen=True, slots=True)
class FunctionSpec:
    """Declared shape of an aggregate function, used for UI prompting only."""

    name: AggregateFunction
    params: tuple[str, ...]
    description: str

    def to_dict(self) -> dict[str, object]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation
        """
        return {
            'name': self.name.value,
            'params': list(self.params),
            'description': self.description,
        }


SQL_FUNCTIONS: tuple[FunctionSpec, ...] = (
    FunctionSpec(AggregateFunction.COUNT, ('*', 'column'), 'Count rows or non-null values'),
    FunctionSpec(AggregateFunction.SUM, ('column',), 'Sum numeric values'),
    FunctionSpec(AggregateFunction.AVG, ('column',), 'Average of numeric values'),
    FunctionSpec(AggregateFunction.MIN, ('column',), 'Minimum value'),
    FunctionSpec(AggregateFunction.MAX, ('column',), 'Maximum value'),
    FunctionSpec(AggregateFunction.DATE_TRUNC, ('precision', 'column'), 'Truncate date to precision'),
    FunctionSpec(AggregateFunction.EXTRACT, ('part', 'column'), 'Extract part from date'),
    FunctionSpec(AggregateFunction.UPPER, ('column',), 'Convert to uppercase'),
    FunctionSpec(AggregateFunction.LOWER, ('column',), 'Convert to lowercase'),
    FunctionSpec(AggregateFunction.LENGTH, ('column',), 'String length'),
)

SQL_OPERATORS: tuple[str, ...] = tuple(op.value for op in ConditionOperator)

# Rendering constants
WILDCARD = '*'
DATE_TRUNC_PRECISION = 'day'
EXTRACT_PART = 'year'

# Operator groups for value formatting
MEMBERSHIP_OPERATORS = frozenset({ConditionOperator.IN, ConditionOperator.NOT_IN})
PATTERN_OPERATORS = frozenset({
    ConditionOperator.LIKE,
    ConditionOperator.ILIKE,
    ConditionOperator.NOT_LIKE,
    ConditionOperator.NOT_ILIKE,
})
NULLABILITY_OPERATORS = frozenset({ConditionOperator.IS_NULL, ConditionOperator.IS_NOT_NULL})
RANGE_OPERATORS = frozenset({ConditionOperator.BETWEEN, ConditionOperator.NOT_BETWEEN})

# Mutating / DDL keywords that make query text unsafe to execute
FORBIDDEN_KEYWORDS: tuple[str, ...] = (
    'drop',
    'delete',
    'update',
    'insert',
    'alter',
    'create',
    'truncate',
)

READ_ONLY_KEYWORD = 'select'
