"""Query builder exception hierarchy."""


class QBError(Exception):
    """Base exception for query builder errors."""


class QBConfigurationError(QBError, ValueError):
    """Raised when a configuration mutation would break referential integrity."""

    def __init__(self, message: str, path: str | None = None) -> None:
        """
        Initialize QBConfigurationError.

        Args:
            message: Error message
            path: Path in the configuration where the error occurred (e.g., 'joins[0].rightTable')
        """
        self.path = path
        if path:
            super().__init__(f'{message} (at {path})')
        else:
            super().__init__(message)


class QBValidationError(QBError):
    """Raised when query text is rejected before execution."""

    def __init__(self, errors: list[str], sql: str | None = None) -> None:
        """
        Initialize QBValidationError.

        Args:
            errors: All accumulated validation messages, in order
            sql: Rejected query text
        """
        self.errors = list(errors)
        self.sql = sql
        super().__init__('; '.join(self.errors) or 'Query rejected')


class QBExecutionError(QBError, RuntimeError):
    """Raised when query execution fails."""

    def __init__(
        self,
        message: str,
        sql: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize QBExecutionError.

        Args:
            message: Error message
            sql: Query text that failed
            original_error: Original exception that caused the error
        """
        self.sql = sql
        self.original_error = original_error
        super().__init__(message)


class QBNotFoundError(QBError, LookupError):
    """Saved query or table not found."""

    def __init__(self, name: str, message: str | None = None) -> None:
        """
        Initialize not found error.

        Args:
            name: Identifier that was looked up
            message: Optional custom message
        """
        self.name = name
        super().__init__(message or f'Not found: {name}')
