"""Shared utilities for the struct generator."""

from .config import (
    Settings,
    load_config_file,
    mask_connection,
    resolve_settings,
)
from .naming import (
    go_name,
    split_table_list,
)
from .types import (
    FALLBACK_GO_TYPE,
    GO_TYPES,
    SqlType,
    go_type,
)
from .errors import (
    CatalogError,
    CatalogConnectionError,
    QueryError,
    SchemaEnumerationError,
    PrimaryKeyQueryError,
    ColumnQueryError,
    SequenceQueryError,
    ConfigError,
)

__all__ = [
    # Configuration
    "Settings",
    "load_config_file",
    "mask_connection",
    "resolve_settings",
    # Naming utilities
    "go_name",
    "split_table_list",
    # Type mapping
    "FALLBACK_GO_TYPE",
    "GO_TYPES",
    "SqlType",
    "go_type",
    # Errors
    "CatalogError",
    "CatalogConnectionError",
    "QueryError",
    "SchemaEnumerationError",
    "PrimaryKeyQueryError",
    "ColumnQueryError",
    "SequenceQueryError",
    "ConfigError",
]
