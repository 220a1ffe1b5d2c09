"""
Structural screening of query text before execution or export.

The checks are heuristics, not a security boundary: they reject text that is
obviously not a single read-only query, and nothing more. Deployments must
still execute with a read-only database credential.
"""

import logging
import re

import sqlparse
from sqlglot.errors import TokenError
from sqlglot.tokens import Tokenizer
from sqlglot.tokens import TokenType

from namerec.qbuilder.constants import FORBIDDEN_KEYWORDS
from namerec.qbuilder.constants import READ_ONLY_KEYWORD
from namerec.qbuilder.types import ValidationResult

logger = logging.getLogger(__name__)

ERROR_NOT_SELECT = 'Query must start with SELECT'
ERROR_NO_FROM = 'Query must include FROM clause'
ERROR_UNBALANCED_PARENS = 'Unbalanced parentheses in query'
ERROR_RESTRICTED_KEYWORDS = 'Query contains restricted keywords'

_SELECT_RE = re.compile(rf'^{READ_ONLY_KEYWORD}\b')
_FROM_RE = re.compile(r'\bfrom\b')
_FORBIDDEN_RE = re.compile(r'\b(' + '|'.join(FORBIDDEN_KEYWORDS) + r')\b')

# Tokens whose text is data rather than SQL keywords
_LITERAL_TOKEN_TYPES = frozenset(
    token_type
    for name in (
        'STRING',
        'IDENTIFIER',
        'NATIONAL_STRING',
        'RAW_STRING',
        'HEREDOC_STRING',
        'BIT_STRING',
        'HEX_STRING',
        'BYTE_STRING',
        'UNICODE_STRING',
    )
    if (token_type := getattr(TokenType, name, None)) is not None
)


def normalize_sql(sql: str) -> str:
    """Trim and lower-case query text."""
    return sql.strip().lower()


def find_forbidden_keywords(sql: str) -> list[str]:
    """
    Find denylisted keywords used as whole SQL tokens.

    String literals and quoted identifiers are ignored, so `created_at` or
    `'please update'` do not match. Text the tokenizer cannot handle (for
    example an unterminated string) falls back to word-boundary matching.

    Args:
        sql: Query text

    Returns:
        Distinct forbidden keywords in order of first appearance
    """
    found: list[str] = []
    try:
        words = (
            token.text.lower()
            for token in Tokenizer().tokenize(sql)
            if token.token_type not in _LITERAL_TOKEN_TYPES
        )
        candidates = [word for word in words if word in FORBIDDEN_KEYWORDS]
    except TokenError as e:
        logger.debug(f'Tokenizer failed, falling back to word-boundary screen: {e}')
        candidates = _FORBIDDEN_RE.findall(normalize_sql(sql))

    for keyword in candidates:
        if keyword not in found:
            found.append(keyword)
    return found


def validate_sql(sql: str) -> ValidationResult:
    """
    Screen query text for structural validity and forbidden operations.

    All failing rules are reported, not just the first one.

    Args:
        sql: Query text (generated or edited by the user)

    Returns:
        ValidationResult with is_valid and the accumulated error messages

    Example:
        >>> validate_sql('DELETE FROM users').errors
        ('Query must start with SELECT', 'Query contains restricted keywords: delete')
    """
    errors: list[str] = []
    normalized = normalize_sql(sql)

    if not _SELECT_RE.match(normalized):
        errors.append(ERROR_NOT_SELECT)

    if not _FROM_RE.search(normalized):
        errors.append(ERROR_NO_FROM)

    if sql.count('(') != sql.count(')'):
        errors.append(ERROR_UNBALANCED_PARENS)

    if forbidden := find_forbidden_keywords(sql):
        errors.append(f'{ERROR_RESTRICTED_KEYWORDS}: {", ".join(forbidden)}')

    if errors:
        logger.debug(f'Query rejected: {errors}')
    return ValidationResult(is_valid=not errors, errors=tuple(errors))


def is_select_statement(sql: str) -> bool:
    """
    Check that every statement in the text starts with SELECT.

    This is the narrow gate the execute and export entry points apply before
    running the full validator. Leading comments are skipped.

    Args:
        sql: Query text

    Returns:
        True if there is at least one statement and all of them are SELECTs
    """
    leading_tokens = [
        first
        for statement in sqlparse.parse(sql)
        if (first := statement.token_first(skip_ws=True, skip_cm=True)) is not None
    ]
    if not leading_tokens:
        return False
    return all(token.normalized.lower() == READ_ONLY_KEYWORD for token in leading_tokens)
