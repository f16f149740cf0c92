"""Catalog access: connection handle and metadata queries."""

from .connection import Catalog, create_catalog_engine, open_catalog
from .introspection import (
    Column,
    fetch_columns,
    has_sequence,
    list_tables,
    primary_keys,
    sequence_name,
)

__all__ = [
    "Catalog",
    "create_catalog_engine",
    "open_catalog",
    "Column",
    "fetch_columns",
    "has_sequence",
    "list_tables",
    "primary_keys",
    "sequence_name",
]
