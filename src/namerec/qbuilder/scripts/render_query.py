#!/usr/bin/env python3
"""Console script to render a query configuration as SQL, or validate SQL text."""

import json
import sys
from typing import Annotated

import sqlparse
import typer

from namerec.qbuilder.exceptions import QBConfigurationError
from namerec.qbuilder.logging_config import configure_logging
from namerec.qbuilder.settings import get_settings
from namerec.qbuilder.sql.generator import generate_parameterized
from namerec.qbuilder.sql.generator import generate_sql
from namerec.qbuilder.sql.validator import validate_sql
from namerec.qbuilder.types import QueryConfiguration

app = typer.Typer(help='Render query builder configurations as SQL and validate SQL text.')


@app.command()
def render(
    input_file: Annotated[
        typer.FileText | None,
        typer.Argument(help='Input file (defaults to stdin)'),
    ] = None,
    dialect: Annotated[
        str | None,
        typer.Option('--dialect', '-d', help='Target SQL dialect (postgres, mysql, sqlite, duckdb, etc.)'),
    ] = None,
    validate: Annotated[
        bool,
        typer.Option('--validate', help='Treat input as SQL text and validate it'),
    ] = False,
    parameterized: Annotated[
        bool,
        typer.Option('--parameterized', help='Render WHERE values as bind parameters and print them as JSON'),
    ] = False,
    pretty: Annotated[
        bool,
        typer.Option('--pretty/--no-pretty', help='Reformat output SQL'),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option('--log-level', help='Logging level (defaults to QBUILDER_LOG_LEVEL)'),
    ] = None,
) -> None:
    """
    Render a configuration JSON document as SQL.

    With --validate, the input is SQL text instead: it is screened and every
    problem is printed; the exit code is 1 when the text is rejected.

    Examples:

        # Render a configuration
        echo '{"selectedTables": [{"schema": "public", "name": "users"}]}' | qbuilder-render

        # Render for MySQL
        qbuilder-render query.json --dialect mysql

        # Validate SQL text
        echo "DELETE FROM users" | qbuilder-render --validate
    """
    settings = get_settings()
    configure_logging(log_level or settings.log_level)

    input_text = (input_file.read() if input_file else sys.stdin.read()).strip()
    if not input_text:
        typer.echo('Error: No input provided', err=True)
        raise typer.Exit(1)

    if validate:
        _validate(input_text)
        return

    config = _load_configuration(input_text)
    dialect = dialect or settings.dialect
    if parameterized:
        try:
            statement = generate_parameterized(config, dialect)
        except QBConfigurationError as e:
            typer.echo(f'Error: {e!s}', err=True)
            raise typer.Exit(1)
        typer.echo(_format(statement.text, pretty))
        typer.echo(json.dumps(statement.params, ensure_ascii=False, default=str))
        return

    typer.echo(_format(generate_sql(config, dialect), pretty))


def _validate(sql: str) -> None:
    """Print validation outcome; exit 1 when rejected."""
    result = validate_sql(sql)
    if result.is_valid:
        typer.echo('OK')
        return

    for error in result.errors:
        typer.echo(f'- {error}', err=True)
    raise typer.Exit(1)


def _load_configuration(input_text: str) -> QueryConfiguration:
    """Parse configuration JSON."""
    try:
        data = json.loads(input_text)
    except json.JSONDecodeError as e:
        typer.echo(f'Error: Invalid JSON: {e}', err=True)
        raise typer.Exit(1)

    if not isinstance(data, dict):
        typer.echo('Error: Configuration must be a JSON object', err=True)
        raise typer.Exit(1)

    try:
        return QueryConfiguration.from_dict(data)
    except QBConfigurationError as e:
        typer.echo(f'Error: Invalid configuration: {e!s}', err=True)
        raise typer.Exit(1)


def _format(sql: str, pretty: bool) -> str:
    if not pretty:
        return sql
    return sqlparse.format(sql, reindent=True, keyword_case='upper')


def main() -> None:
    """Entry point for the script."""
    app()


if __name__ == '__main__':
    main()
