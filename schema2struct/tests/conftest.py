"""Shared fixtures: an in-memory SQLite database exposing INFORMATION_SCHEMA."""

from __future__ import annotations

from typing import Any

import pytest
from sqlalchemy import create_engine, event, text
from sqlalchemy.pool import StaticPool

from schema2struct.catalog import Catalog

_VIEWS = (
    "KEY_COLUMN_USAGE",
    "SEQUENCES",
    "COLUMNS",
    "TABLES",
)

_CATALOG_DDL = (
    "ATTACH DATABASE ':memory:' AS information_schema",
    "CREATE TABLE information_schema.tables (table_schema TEXT, table_name TEXT)",
    "CREATE TABLE information_schema.columns ("
    " table_schema TEXT, table_name TEXT, column_name TEXT, data_type TEXT,"
    " character_maximum_length INTEGER, ordinal_position INTEGER)",
    "CREATE TABLE information_schema.table_constraints ("
    " constraint_name TEXT, constraint_schema TEXT, table_schema TEXT,"
    " table_name TEXT, constraint_type TEXT)",
    "CREATE TABLE information_schema.key_column_usage ("
    " constraint_name TEXT, constraint_schema TEXT, table_schema TEXT,"
    " table_name TEXT, column_name TEXT, ordinal_position INTEGER)",
    "CREATE TABLE information_schema.sequences (sequence_schema TEXT, sequence_name TEXT)",
)


class InformationSchema:
    """Populates the catalog views of an SQLite engine and records queries.

    ``failing`` holds view names, or ``(view, parameter)`` pairs, whose
    queries are redirected to a missing relation so the driver raises.
    """

    def __init__(
        self,
        engine,
        tables: list[str] | None = None,
        columns: dict[str, list[tuple[str, str, int | None]]] | None = None,
        primary_keys: dict[str, list[str]] | None = None,
        sequences: set[str] | None = None,
        failing: set[Any] | None = None,
    ) -> None:
        self.engine = engine
        self.failing = failing or set()
        self.executed: list[tuple[str, tuple[Any, ...]]] = []

        with engine.connect() as connection:
            for statement in _CATALOG_DDL:
                connection.exec_driver_sql(statement)

        for table in tables or []:
            self.add_table(table)
        for table, table_columns in (columns or {}).items():
            self.add_columns(table, table_columns)
        for table, key in (primary_keys or {}).items():
            self.add_primary_key(table, key)
        for name in sequences or set():
            self.add_sequence(name)

        event.listen(engine, "before_cursor_execute", self._before_execute, retval=True)

    def _insert(self, sql: str, rows: list[dict[str, Any]]) -> None:
        if rows:
            with self.engine.connect() as connection:
                connection.execute(text(sql), rows)

    def add_table(self, table: str, schema: str = "public") -> None:
        self._insert(
            "INSERT INTO information_schema.tables VALUES (:schema, :table)",
            [{"schema": schema, "table": table}],
        )

    def add_columns(
        self,
        table: str,
        columns: list[tuple[str, str, int | None]],
        schema: str = "public",
    ) -> None:
        rows = [
            {
                "schema": schema,
                "table": table,
                "name": name,
                "type": data_type,
                "length": length,
                "position": position,
            }
            for position, (name, data_type, length) in enumerate(columns, start=1)
        ]
        # Stored back to front so the query has to sort by position.
        self._insert(
            "INSERT INTO information_schema.columns VALUES"
            " (:schema, :table, :name, :type, :length, :position)",
            rows[::-1],
        )

    def add_primary_key(
        self,
        table: str,
        columns: list[str],
        schema: str = "public",
        constraint_type: str = "PRIMARY KEY",
    ) -> None:
        constraint = f"{table}_{constraint_type.split()[0].lower()}"
        self._insert(
            "INSERT INTO information_schema.table_constraints VALUES"
            " (:constraint, :schema, :schema, :table, :type)",
            [{"constraint": constraint, "schema": schema, "table": table, "type": constraint_type}],
        )
        self._insert(
            "INSERT INTO information_schema.key_column_usage VALUES"
            " (:constraint, :schema, :schema, :table, :column, :position)",
            [
                {
                    "constraint": constraint,
                    "schema": schema,
                    "table": table,
                    "column": column,
                    "position": position,
                }
                for position, column in enumerate(columns, start=1)
            ][::-1],
        )

    def add_sequence(self, name: str, schema: str = "public") -> None:
        self._insert(
            "INSERT INTO information_schema.sequences VALUES (:schema, :name)",
            [{"schema": schema, "name": name}],
        )

    def _before_execute(self, conn, cursor, statement, parameters, context, executemany):
        view = next((v for v in _VIEWS if f"FROM INFORMATION_SCHEMA.{v}" in statement), None)
        if view is None:
            return statement, parameters

        params = tuple(parameters)
        self.executed.append((statement, params))
        if view in self.failing or any((view, p) in self.failing for p in params):
            return f"SELECT * FROM information_schema.broken_{view.lower()}", ()
        return statement, parameters

    def queries_against(self, view: str) -> list[tuple[str, tuple[Any, ...]]]:
        return [q for q in self.executed if f"FROM INFORMATION_SCHEMA.{view}" in q[0]]


def sqlite_engine():
    """A single-connection in-memory SQLite engine."""
    return create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        isolation_level="AUTOCOMMIT",
    )


@pytest.fixture
def make_catalog():
    """Build a Catalog over an SQLite database with INFORMATION_SCHEMA views."""
    opened = []

    def _make(**kwargs: Any) -> tuple[Catalog, InformationSchema]:
        engine = sqlite_engine()
        db = InformationSchema(engine, **kwargs)
        connection = engine.connect()
        opened.append((engine, connection))
        return Catalog(connection), db

    yield _make

    for engine, connection in opened:
        connection.close()
        engine.dispose()


@pytest.fixture
def users_db(make_catalog):
    """A catalog with a serial-keyed ``users`` table."""
    return make_catalog(
        tables=["users"],
        columns={
            "users": [
                ("id", "integer", None),
                ("email", "text", None),
            ]
        },
        primary_keys={"users": ["id"]},
        sequences={"users_id_seq"},
    )


@pytest.fixture
def sqlite_catalog():
    """A Catalog over a plain SQLite table ``t(c, name)``."""
    engine = sqlite_engine()
    with engine.connect() as connection:
        connection.exec_driver_sql("CREATE TABLE t (c TEXT, name TEXT)")
        connection.exec_driver_sql("INSERT INTO t VALUES ('x?1', 'users'), ('y', 'users')")
        yield Catalog(connection)
    engine.dispose()
