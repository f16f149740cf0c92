"""Mapping from catalog column types to Go field types.

The goal is not to provide an exact match for every SQL type but a safe Go
representation of it. Types that could lose precision (``money``) and any
type not listed in :class:`SqlType` are carried as strings.
"""

from __future__ import annotations

from enum import Enum
from typing import Final, Mapping


class SqlType(str, Enum):
    """Catalog type names with a known Go representation."""

    SMALLINT = "smallint"
    SMALLSERIAL = "smallserial"
    INTEGER = "integer"
    SERIAL = "serial"
    BIGINT = "bigint"
    BIGSERIAL = "bigserial"
    REAL = "real"
    DOUBLE_PRECISION = "double precision"
    MONEY = "money"
    TEXT = "text"
    VARCHAR = "varchar"
    CHAR = "char"
    CHARACTER = "character"
    CHARACTER_VARYING = "character varying"
    UUID = "uuid"
    BYTEA = "bytea"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    TIME_TZ = "timetz"
    TIME_WITHOUT_TIME_ZONE = "time without time zone"
    TIME_WITH_TIME_ZONE = "time with time zone"
    TIMESTAMP = "timestamp"
    TIMESTAMP_TZ = "timestamptz"
    TIMESTAMP_WITHOUT_TIME_ZONE = "timestamp without time zone"
    TIMESTAMP_WITH_TIME_ZONE = "timestamp with time zone"
    INTERVAL = "interval"


FALLBACK_GO_TYPE: Final[str] = "string"

_TIME: Final[str] = "time.Time"

GO_TYPES: Final[dict[SqlType, str]] = {
    SqlType.SMALLINT: "int16",
    SqlType.SMALLSERIAL: "int16",
    SqlType.INTEGER: "int32",
    SqlType.SERIAL: "int32",
    SqlType.BIGINT: "int",
    SqlType.BIGSERIAL: "int",
    SqlType.REAL: "float32",
    SqlType.DOUBLE_PRECISION: "float64",
    # base-10 precision must survive the round trip
    SqlType.MONEY: "string",
    SqlType.TEXT: "string",
    SqlType.VARCHAR: "string",
    SqlType.CHAR: "string",
    SqlType.CHARACTER: "string",
    SqlType.CHARACTER_VARYING: "string",
    SqlType.UUID: "string",
    SqlType.BYTEA: "[]byte",
    SqlType.BOOLEAN: "bool",
    SqlType.DATE: _TIME,
    SqlType.TIME: _TIME,
    SqlType.TIME_TZ: _TIME,
    SqlType.TIME_WITHOUT_TIME_ZONE: _TIME,
    SqlType.TIME_WITH_TIME_ZONE: _TIME,
    SqlType.TIMESTAMP: _TIME,
    SqlType.TIMESTAMP_TZ: _TIME,
    SqlType.TIMESTAMP_WITHOUT_TIME_ZONE: _TIME,
    SqlType.TIMESTAMP_WITH_TIME_ZONE: _TIME,
    SqlType.INTERVAL: "time.Duration",
}


def go_type(sql_type: str, overrides: Mapping[str, str] | None = None) -> str:
    """Resolve the Go type for a catalog type name.

    Args:
        sql_type: The ``data_type`` reported by the catalog.
        overrides: Optional user supplied mapping that takes precedence
            over the built-in table.

    Returns:
        The Go type name; ``string`` when the type is not recognised.
    """
    key = sql_type.strip().lower()

    if overrides:
        for name, mapped in overrides.items():
            if name.strip().lower() == key:
                return mapped

    try:
        return GO_TYPES[SqlType(key)]
    except ValueError:
        return FALLBACK_GO_TYPE
