"""Custom exceptions for catalog introspection and code generation."""

from __future__ import annotations


class CatalogError(Exception):
    """Base exception for catalog-related errors."""

    def __init__(self, message: str, table: str | None = None) -> None:
        self.table = table
        full_message = f"{message}" if not table else f"[{table}] {message}"
        super().__init__(full_message)


class CatalogConnectionError(CatalogError):
    """Raised when the database cannot be opened or pinged."""

    def __init__(self, message: str, driver: str | None = None) -> None:
        self.driver = driver
        if driver:
            message = f"Driver '{driver}': {message}"
        super().__init__(message)


class QueryError(CatalogError):
    """Raised when a catalog metadata query fails."""

    def __init__(
        self,
        message: str,
        sql: str | None = None,
        table: str | None = None,
    ) -> None:
        self.sql = sql
        super().__init__(message, table)


class SchemaEnumerationError(QueryError):
    """Raised when the list of tables cannot be fetched."""


class PrimaryKeyQueryError(QueryError):
    """Raised when primary key constraints cannot be read for a table."""


class ColumnQueryError(QueryError):
    """Raised when column metadata cannot be read for a table."""


class SequenceQueryError(QueryError):
    """Raised when sequence metadata cannot be read."""


class ConfigError(Exception):
    """Raised when a configuration file is missing or invalid."""

    def __init__(self, message: str, config_path: str | None = None) -> None:
        self.config_path = config_path
        full_message = f"{message}" if not config_path else f"[{config_path}] {message}"
        super().__init__(full_message)
