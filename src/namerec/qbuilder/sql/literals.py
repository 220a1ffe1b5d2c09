"""
Condition value handling for WHERE rendering.

Condition values arrive from the UI as raw strings. Two renderings exist:

- `format_condition_value` inlines the value into preview text using the
  operator-dependent quoting heuristic (membership values are parenthesised,
  pattern values quoted, nullability checks take no value, anything else is
  quoted unless numeric or already quoted). This is not a parameterisation
  mechanism; embedded quotes are doubled but the text is still built by
  concatenation.
- `parse_condition_value` turns the same raw string into typed Python values
  that are sent out-of-band as bind parameters.
"""

import re
from typing import Any

from namerec.qbuilder.constants import MEMBERSHIP_OPERATORS
from namerec.qbuilder.constants import NULLABILITY_OPERATORS
from namerec.qbuilder.constants import PATTERN_OPERATORS
from namerec.qbuilder.constants import RANGE_OPERATORS
from namerec.qbuilder.constants import ConditionOperator

_INT_RE = re.compile(r'^[+-]?\d+$')
# Leading zeros are significant (zip codes, account numbers)
_LEADING_ZERO_RE = re.compile(r'^[+-]?0\d')
_NUMBER_RE = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$')
_RANGE_RE = re.compile(r"^('(?:[^']|'')*'|.+?)\s+AND\s+('(?:[^']|'')*'|.+?)$", re.IGNORECASE | re.DOTALL)
_LIST_ITEM_RE = re.compile(r"\s*('(?:[^']|'')*'|[^,]+)")


def quote_literal(value: str) -> str:
    """Wrap a string in single quotes, doubling embedded quotes."""
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


def is_quoted(value: str) -> bool:
    """Check whether the user already wrote a quoted literal."""
    return len(value) >= 2 and value.startswith("'") and value.endswith("'")


def is_numeric(value: str) -> bool:
    """Check whether a raw value reads as a numeric literal."""
    return bool(_NUMBER_RE.match(value))


def _unquote(value: str) -> str:
    return value[1:-1].replace("''", "'")


def _format_scalar(value: str) -> str:
    if is_numeric(value) or is_quoted(value):
        return value
    return quote_literal(value)


def split_range(value: str) -> tuple[str, str] | None:
    """
    Split a BETWEEN value of the form 'low AND high'.

    Returns:
        (low, high) or None when the value does not have two bounds
    """
    match = _RANGE_RE.match(value.strip())
    if not match:
        return None
    return match.group(1).strip(), match.group(2).strip()


def split_list(value: str) -> list[str]:
    """Split an IN value ('a, b' or '(1, 2)') into its raw items."""
    inner = value.strip()
    if inner.startswith('(') and inner.endswith(')'):
        inner = inner[1:-1]
    return [item.strip() for item in _LIST_ITEM_RE.findall(inner) if item.strip()]


def format_condition_value(operator: ConditionOperator | None, raw: str) -> str | None:
    """
    Render a condition value for inline preview text.

    Args:
        operator: Condition operator
        raw: Value as typed by the user

    Returns:
        Rendered value, or None when the operator takes no value or the value is empty
    """
    value = raw.strip()
    if operator in NULLABILITY_OPERATORS or not value:
        return None
    if operator in MEMBERSHIP_OPERATORS:
        return value if value.startswith('(') else f'({value})'
    if operator in PATTERN_OPERATORS:
        return value if is_quoted(value) else quote_literal(value)
    if operator in RANGE_OPERATORS and (bounds := split_range(value)):
        low, high = bounds
        return f'{_format_scalar(low)} AND {_format_scalar(high)}'
    return _format_scalar(value)


def is_literal_list(raw: str) -> bool:
    """
    Check whether an IN value is a plain list of quoted or numeric literals.

    Anything else (a subquery, column references, function calls) has to stay
    inline in the query text; binding it would turn SQL into a string value.

    Examples:
        >>> is_literal_list("(1, 'a')")
        True
        >>> is_literal_list('(SELECT user_id FROM orders)')
        False
    """
    items = split_list(raw)
    return bool(items) and all(is_quoted(item) or is_numeric(item) for item in items)


def _typed_scalar(value: str, *, numbers: bool = True) -> Any:
    if is_quoted(value):
        return _unquote(value)
    if not numbers or _LEADING_ZERO_RE.match(value):
        return value
    if _INT_RE.match(value):
        return int(value)
    if is_numeric(value):
        return float(value)
    return value


def parse_condition_value(operator: ConditionOperator, raw: str) -> tuple[Any, ...]:
    """
    Convert a raw condition value into typed bind parameter values.

    Args:
        operator: Condition operator
        raw: Value as typed by the user

    Returns:
        Tuple of values: empty for nullability checks and empty input, one item
        per list element for IN, two bounds for BETWEEN, otherwise one value

    Examples:
        >>> parse_condition_value(ConditionOperator.IN, "(1, 'a,b')")
        (1, 'a,b')
        >>> parse_condition_value(ConditionOperator.LIKE, '5%')
        ('5%',)
    """
    value = raw.strip()
    if operator in NULLABILITY_OPERATORS or not value:
        return ()
    if operator in MEMBERSHIP_OPERATORS:
        return tuple(_typed_scalar(item) for item in split_list(value))
    if operator in PATTERN_OPERATORS:
        return (_typed_scalar(value, numbers=False),)
    if operator in RANGE_OPERATORS and (bounds := split_range(value)):
        return tuple(_typed_scalar(bound) for bound in bounds)
    return (_typed_scalar(value),)
