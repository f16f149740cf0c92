"""Database handle used to run catalog metadata queries."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Final, Iterator

import psycopg
from sqlalchemy import URL, Connection, Engine, create_engine, make_url, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import TextClause

from ..shared.config import mask_connection
from ..shared.errors import CatalogConnectionError, QueryError

logger = logging.getLogger(__name__)

POSTGRES_DRIVERS: Final[frozenset[str]] = frozenset({"postgres", "postgresql"})
POSTGRES_DIALECT: Final[str] = "postgresql+psycopg"

# Catalog reads run outside any transaction.
ISOLATION_LEVEL: Final[str] = "AUTOCOMMIT"

PING_QUERY: Final[TextClause] = text("SELECT 1")


def _driver_message(error: BaseException) -> str:
    orig = getattr(error, "orig", None)
    return str(orig or error).strip() or type(error).__name__


class Catalog:
    """Runs textual SELECT statements on a single SQLAlchemy connection.

    The handle does not own the connection; :func:`open_catalog` opens it
    and guarantees it is closed.
    """

    __slots__ = ("_connection",)

    def __init__(self, connection: Connection) -> None:
        self._connection = connection

    @property
    def dialect(self) -> str:
        return self._connection.dialect.name

    def fetch_all(self, statement: TextClause, **params: Any) -> list[tuple[Any, ...]]:
        """Run a statement with named parameters and return every row.

        Raises:
            QueryError: If the database reports an error.
        """
        logger.debug("Catalog query: %s %r", statement, params)
        try:
            result = self._connection.execute(statement, params)
            return [tuple(row) for row in result]
        except SQLAlchemyError as e:
            self._connection.rollback()
            raise QueryError(_driver_message(e), str(statement)) from e

    def fetch_column(self, statement: TextClause, **params: Any) -> list[Any]:
        """Run a statement and return the first value of every row."""
        return [row[0] for row in self.fetch_all(statement, **params)]

    def fetch_value(self, statement: TextClause, **params: Any) -> Any:
        """Run a statement and return the first value of the first row, if any."""
        rows = self.fetch_all(statement, **params)
        return rows[0][0] if rows else None

    def ping(self) -> None:
        """Check that the connection can run a statement."""
        self.fetch_value(PING_QUERY)


def _dialect(driver: str) -> str:
    return POSTGRES_DIALECT if driver in POSTGRES_DRIVERS else driver


def create_catalog_engine(driver: str, dsn: str) -> Engine:
    """Create the engine for a driver name and connection string.

    A connection string containing ``://`` is a database URL whose scheme
    selects the dialect. Otherwise ``postgres`` hands the libpq keyword
    string to psycopg, and any other driver name is used as the dialect
    with the connection string as its database.

    Raises:
        CatalogConnectionError: If the dialect or its DBAPI module is
            unavailable, or the URL cannot be parsed.
    """
    try:
        if "://" in dsn:
            url = make_url(dsn)
            url = url.set(drivername=_dialect(url.drivername))
            return create_engine(url, isolation_level=ISOLATION_LEVEL)

        if driver in POSTGRES_DRIVERS:
            return create_engine(
                f"{POSTGRES_DIALECT}://",
                creator=lambda: psycopg.connect(dsn),
                isolation_level=ISOLATION_LEVEL,
            )

        url = URL.create(_dialect(driver), database=dsn)
        return create_engine(url, isolation_level=ISOLATION_LEVEL)
    except (SQLAlchemyError, ImportError) as e:
        raise CatalogConnectionError(f"cannot load dialect: {e}", driver) from e


@contextmanager
def open_catalog(driver: str, dsn: str) -> Iterator[Catalog]:
    """Connect, verify the connection and yield a :class:`Catalog`.

    The connection is closed and the engine disposed on every exit path.

    Raises:
        CatalogConnectionError: If the dialect is unavailable or the
            database cannot be reached.
    """
    logger.info("Connecting to %s (driver %s)", mask_connection(dsn), driver)
    engine = create_catalog_engine(driver, dsn)

    try:
        try:
            connection = engine.connect()
        except SQLAlchemyError as e:
            raise CatalogConnectionError(
                f"cannot connect: {_driver_message(e)}", driver
            ) from e

        with connection:
            catalog = Catalog(connection)
            try:
                catalog.ping()
            except QueryError as e:
                raise CatalogConnectionError(f"ping failed: {e}", driver) from e
            logger.debug("Connected using the %s dialect", catalog.dialect)
            yield catalog
    finally:
        engine.dispose()
        logger.debug("Closed connection to %s", mask_connection(dsn))
