"""Query text generation and validation."""

from namerec.qbuilder.sql.clauses import Clause
from namerec.qbuilder.sql.clauses import ClauseKind
from namerec.qbuilder.sql.clauses import Statement
from namerec.qbuilder.sql.generator import build_statement
from namerec.qbuilder.sql.generator import generate_parameterized
from namerec.qbuilder.sql.generator import generate_sql
from namerec.qbuilder.sql.generator import render_subquery
from namerec.qbuilder.sql.generator import transpile_sql
from namerec.qbuilder.sql.validator import is_select_statement
from namerec.qbuilder.sql.validator import validate_sql

__all__ = [
    'Clause',
    'ClauseKind',
    'Statement',
    'build_statement',
    'generate_parameterized',
    'generate_sql',
    'is_select_statement',
    'render_subquery',
    'transpile_sql',
    'validate_sql',
]
