"""Queries against the INFORMATION_SCHEMA catalog views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from sqlalchemy import text
from sqlalchemy.sql.elements import TextClause

from ..shared.errors import (
    ColumnQueryError,
    PrimaryKeyQueryError,
    QueryError,
    SchemaEnumerationError,
    SequenceQueryError,
)
from .connection import Catalog

# Budget shared by the table and column parts of an implicit sequence name
SEQUENCE_NAME_BUDGET: Final[int] = 58
SEQUENCE_TABLE_LIMIT: Final[int] = 29

TABLES_QUERY: Final[TextClause] = text(
    "SELECT table_name FROM INFORMATION_SCHEMA.TABLES"
    " WHERE table_schema = :schema"
)

PRIMARY_KEYS_QUERY: Final[TextClause] = text(
    "SELECT c.column_name FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE AS c"
    " JOIN INFORMATION_SCHEMA.TABLE_CONSTRAINTS AS t"
    " ON t.constraint_name = c.constraint_name"
    " AND t.constraint_schema = c.constraint_schema"
    " AND t.table_schema = c.table_schema"
    " AND t.table_name = c.table_name"
    " WHERE t.table_schema = :schema"
    " AND t.table_name = :table"
    " AND t.constraint_type = 'PRIMARY KEY'"
    " ORDER BY c.ordinal_position"
)

SEQUENCE_QUERY: Final[TextClause] = text(
    "SELECT COUNT(*) FROM INFORMATION_SCHEMA.SEQUENCES"
    " WHERE sequence_schema = :schema"
    " AND sequence_name = :name"
)

COLUMNS_QUERY: Final[TextClause] = text(
    "SELECT column_name, data_type, character_maximum_length"
    " FROM INFORMATION_SCHEMA.COLUMNS"
    " WHERE table_schema = :schema"
    " AND table_name = :table"
    " ORDER BY ordinal_position"
)


@dataclass(frozen=True, slots=True)
class Column:
    """A column as reported by INFORMATION_SCHEMA.COLUMNS."""

    name: str
    data_type: str
    max_length: int | None = None


def list_tables(catalog: Catalog, schema: str = "public") -> list[str]:
    """List the tables of a schema in catalog order.

    Raises:
        SchemaEnumerationError: If the table listing cannot be read.
    """
    try:
        return [str(name) for name in catalog.fetch_column(TABLES_QUERY, schema=schema)]
    except QueryError as e:
        raise SchemaEnumerationError(
            f"Cannot fetch list of tables in schema '{schema}': {e}", e.sql
        ) from e


def primary_keys(catalog: Catalog, table: str, schema: str = "public") -> list[str]:
    """Return the primary key columns of ``schema.table`` in key order.

    Raises:
        PrimaryKeyQueryError: If the constraint views cannot be read.
    """
    try:
        names = catalog.fetch_column(PRIMARY_KEYS_QUERY, schema=schema, table=table)
    except QueryError as e:
        raise PrimaryKeyQueryError(f"Error getting primary keys: {e}", e.sql, table) from e
    return [str(name) for name in names]


def sequence_name(table: str, column: str) -> str:
    """Build the implicit sequence name for a serial column.

    Both parts are truncated so that together they fit the identifier
    budget; the table part never exceeds 29 characters.
    """
    table_part = table[:SEQUENCE_TABLE_LIMIT]
    column_part = column[: SEQUENCE_NAME_BUDGET - len(table_part)]
    return f"{table_part}_{column_part}_seq"


def has_sequence(catalog: Catalog, table: str, column: str, schema: str = "public") -> bool:
    """Check whether ``schema`` holds a sequence named after ``table`` and ``column``.

    Raises:
        SequenceQueryError: If the sequence view cannot be read.
    """
    name = sequence_name(table, column)
    try:
        count = catalog.fetch_value(SEQUENCE_QUERY, schema=schema, name=name)
    except QueryError as e:
        raise SequenceQueryError(
            f"Error looking up sequence '{name}': {e}", e.sql, table
        ) from e
    return bool(count) and int(count) > 0


def fetch_columns(catalog: Catalog, table: str, schema: str = "public") -> list[Column]:
    """Return the columns of ``schema.table`` in ordinal order.

    Raises:
        ColumnQueryError: If the column view cannot be read.
    """
    try:
        rows = catalog.fetch_all(COLUMNS_QUERY, schema=schema, table=table)
    except QueryError as e:
        raise ColumnQueryError(f"Failed to import table: {e}", e.sql, table) from e

    return [
        Column(
            name=str(name),
            data_type=str(data_type),
            max_length=int(max_length) if max_length is not None else None,
        )
        for name, data_type, max_length in rows
    ]
