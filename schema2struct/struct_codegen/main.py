"""
Struct Code Generator - Generates Go structable structs from a live schema.

This module reads table definitions from the database catalog and renders
one record struct per table:
- Column names normalised into exported Go identifiers
- Catalog types mapped to safe Go types
- Primary key and serial markers in each field's struct tag
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Final, Iterator, Mapping, NoReturn, Sequence, TextIO

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .. import __version__
from ..catalog import (
    Catalog,
    Column,
    fetch_columns,
    has_sequence,
    list_tables,
    open_catalog,
    primary_keys,
)
from ..shared import (
    CatalogConnectionError,
    ColumnQueryError,
    ConfigError,
    PrimaryKeyQueryError,
    SchemaEnumerationError,
    SequenceQueryError,
    Settings,
    go_name,
    go_type,
    mask_connection,
    resolve_settings,
)

logger = logging.getLogger(__name__)

# Template configuration
TEMPLATE_DIR: Final[Path] = Path(__file__).parent / "templates"

PRIMARY_KEY_MARKER: Final[str] = "PRIMARY_KEY"
SERIAL_MARKER: Final[str] = "SERIAL"
FIELD_TAG: Final[str] = "stbl"

# Exit statuses
EXIT_CONNECTION: Final[int] = 1
EXIT_ENUMERATION: Final[int] = 2
EXIT_TABLES_SKIPPED: Final[int] = 3
EXIT_CONFIG: Final[int] = 4


def annotate(tag: str, value: str) -> str:
    """Format a Go struct tag such as ``tablename:"users"``."""
    return f"`{tag}:{json.dumps(value)}`"


def go_string(value: str) -> str:
    """Quote a string for Go literal embedding."""
    return json.dumps(value)


TEMPLATE_HELPERS: Final[Mapping[str, Callable[..., str]]] = MappingProxyType(
    {
        "ann": annotate,
    }
)
TEMPLATE_FILTERS: Final[Mapping[str, Callable[..., str]]] = MappingProxyType(
    {
        "go_string": go_string,
    }
)


@dataclass(frozen=True, slots=True)
class FieldDescription:
    """A single struct field line."""

    name: str
    field_type: str
    tag: str

    def __str__(self) -> str:
        return f"{self.name} {self.field_type} {annotate(FIELD_TAG, self.tag)}"


@dataclass(frozen=True, slots=True)
class TableDescription:
    """Everything the struct template needs for one table."""

    struct_name: str
    table_name: str
    fields: tuple[FieldDescription, ...]


@dataclass
class GenerationResult:
    """Outcome of a generation run."""

    generated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


@dataclass
class GeneratorContext:
    """Context for code generation with compiled templates."""

    template_env: Environment = field(init=False)

    def __post_init__(self) -> None:
        self.template_env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            auto_reload=False,
        )
        self.template_env.globals.update(TEMPLATE_HELPERS)
        self.template_env.filters.update(TEMPLATE_FILTERS)
        self._header_template = self.template_env.get_template("header.go.j2")
        self._struct_template = self.template_env.get_template("struct.go.j2")

    @property
    def header_template(self):
        return self._header_template

    @property
    def struct_template(self):
        return self._struct_template


def build_field(
    column: Column,
    is_primary: bool = False,
    is_serial: bool = False,
    type_overrides: Mapping[str, str] | None = None,
) -> FieldDescription:
    """Build the field description for a column.

    ``is_serial`` only takes effect for primary key columns.
    """
    tag = column.name
    if is_primary:
        tag += f",{PRIMARY_KEY_MARKER}"
        if is_serial:
            tag += f",{SERIAL_MARKER}"

    return FieldDescription(
        name=go_name(column.name),
        field_type=go_type(column.data_type, type_overrides),
        tag=tag,
    )


def _resolve_primary_keys(catalog: Catalog, table: str, schema: str) -> list[str]:
    try:
        return primary_keys(catalog, table, schema)
    except PrimaryKeyQueryError as e:
        logger.warning("%s; continuing without primary key markers", e)
        return []


def _is_serial(catalog: Catalog, table: str, column: str, schema: str) -> bool:
    try:
        return has_sequence(catalog, table, column, schema)
    except SequenceQueryError as e:
        logger.warning("%s; column '%s' will not be marked serial", e, column)
        return False


def introspect_table(
    catalog: Catalog,
    table: str,
    type_overrides: Mapping[str, str] | None = None,
    schema: str = "public",
) -> TableDescription:
    """Read a table definition from the catalog.

    Primary key and sequence lookups are best effort: failures are logged
    and only degrade the tag markers.

    Raises:
        ColumnQueryError: If the table's columns cannot be read.
    """
    keys = _resolve_primary_keys(catalog, table, schema)
    columns = fetch_columns(catalog, table, schema)

    fields = []
    for column in columns:
        is_primary = column.name in keys
        is_serial = is_primary and _is_serial(catalog, table, column.name, schema)
        fields.append(build_field(column, is_primary, is_serial, type_overrides))

    logger.info(
        "Introspected table %s: %d column(s), primary key %s",
        table,
        len(fields),
        keys or "none",
    )
    return TableDescription(
        struct_name=go_name(table),
        table_name=table,
        fields=tuple(fields),
    )


def render_header(ctx: GeneratorContext, package: str = "model") -> str:
    """Render the static file header."""
    return ctx.header_template.render(package=package)


def render_table(ctx: GeneratorContext, description: TableDescription) -> str:
    """Render the struct definition for one table."""
    return ctx.struct_template.render(
        struct_name=description.struct_name,
        table_name=description.table_name,
        fields=description.fields,
    )


def generate(
    catalog: Catalog,
    tables: Sequence[str],
    out: TextIO,
    *,
    package: str = "model",
    type_overrides: Mapping[str, str] | None = None,
    schema: str = "public",
    ctx: GeneratorContext | None = None,
) -> GenerationResult:
    """Write the header and one struct per table to ``out``.

    Tables are processed sequentially in the given order. A table whose
    columns cannot be read is skipped and reported in the result.
    """
    ctx = ctx or GeneratorContext()
    result = GenerationResult()

    out.write(render_header(ctx, package))

    for table in tables:
        try:
            description = introspect_table(catalog, table, type_overrides, schema)
        except ColumnQueryError as e:
            logger.error("%s", e)
            result.skipped.append(table)
            continue

        out.write(render_table(ctx, description))
        result.generated.append(table)

    return result


def resolve_tables(catalog: Catalog, settings: Settings) -> list[str]:
    """Use the explicit table list, or enumerate the configured schema.

    Raises:
        SchemaEnumerationError: If the schema cannot be enumerated.
    """
    if settings.tables:
        return list(settings.tables)
    return list_tables(catalog, settings.schema)


def configure_logging(verbose: bool = False, debug: bool = False) -> None:
    """Send log records to stderr at the requested level."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level_name = os.getenv("LOG_LEVEL", "WARNING").upper()
        level = getattr(logging, level_name, logging.WARNING)

    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_parser(description: str) -> argparse.ArgumentParser:
    """Create the argument parser shared by the CLI commands."""
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "-d",
        "--driver",
        default=None,
        help="SQL dialect to use when the connection string is not a URL (default: postgres)",
    )
    parser.add_argument(
        "-c",
        "--connection",
        default=None,
        help=(
            "The database connection string or URL. Environment variables are expanded "
            "(default: 'user=$USER dbname=$USER sslmode=disable')"
        ),
    )
    parser.add_argument(
        "-t",
        "--tables",
        default=None,
        help="Comma separated list of tables. If none specified, the entire schema is used",
    )
    parser.add_argument(
        "-s",
        "--schema",
        default=None,
        help="Schema holding the tables (default: public)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file with driver, connection, tables, schema, package and types",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress information",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log every catalog query",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def _die(message: str, status: int) -> NoReturn:
    print(f"Error: {message}", file=sys.stderr)
    raise SystemExit(status)


def _load_settings(args: argparse.Namespace) -> Settings:
    try:
        return resolve_settings(
            driver=args.driver,
            connection=args.connection,
            tables=args.tables,
            schema=args.schema,
            package=getattr(args, "package", None),
            output=getattr(args, "output", None),
            config_path=args.config,
        )
    except ConfigError as e:
        _die(str(e), EXIT_CONFIG)


@contextmanager
def _open_output(path: Path | None) -> Iterator[TextIO]:
    if path is None:
        yield sys.stdout
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yield handle


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser("Read a schema and generate Structable structs")
    parser.add_argument(
        "-p",
        "--package",
        default=None,
        help="Go package name for the generated file (default: model)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write to this file instead of stdout",
    )

    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.debug)
    settings = _load_settings(args)

    try:
        with open_catalog(settings.driver, settings.dsn) as catalog:
            try:
                tables = resolve_tables(catalog, settings)
            except SchemaEnumerationError as e:
                _die(str(e), EXIT_ENUMERATION)

            with _open_output(settings.output) as out:
                result = generate(
                    catalog,
                    tables,
                    out,
                    package=settings.package,
                    type_overrides=settings.type_overrides,
                    schema=settings.schema,
                )
    except CatalogConnectionError as e:
        _die(
            f"Failed to connect to {mask_connection(settings.dsn)} "
            f"(type {settings.driver}): {e}",
            EXIT_CONNECTION,
        )

    logger.info("Generated %d struct(s)", len(result.generated))
    if result.skipped:
        _die(
            f"Failed to import table(s): {', '.join(result.skipped)}",
            EXIT_TABLES_SKIPPED,
        )


def tables_main(argv: list[str] | None = None) -> None:
    """CLI entry point that prints the tables a generation run would use."""
    parser = build_parser("List the tables structs would be generated for")
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.debug)
    settings = _load_settings(args)

    try:
        with open_catalog(settings.driver, settings.dsn) as catalog:
            try:
                tables = resolve_tables(catalog, settings)
            except SchemaEnumerationError as e:
                _die(str(e), EXIT_ENUMERATION)
    except CatalogConnectionError as e:
        _die(
            f"Failed to connect to {mask_connection(settings.dsn)} "
            f"(type {settings.driver}): {e}",
            EXIT_CONNECTION,
        )

    for table in tables:
        print(table)


if __name__ == "__main__":
    main()
