"""Configuration loading for the struct generator.

Values are resolved from, in order of precedence: command-line flags,
environment variables, an optional YAML config file and built-in defaults.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Mapping

import yaml

from .errors import ConfigError
from .naming import split_table_list

DEFAULT_DRIVER: Final[str] = "postgres"
DEFAULT_CONNECTION: Final[str] = "user=$USER dbname=$USER sslmode=disable"
DEFAULT_SCHEMA: Final[str] = "public"
DEFAULT_PACKAGE: Final[str] = "model"

ENV_PREFIX: Final[str] = "SCHEMA2STRUCT_"

_CONFIG_KEYS: Final[frozenset[str]] = frozenset(
    {"driver", "connection", "tables", "schema", "package", "types"}
)

_PASSWORD_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"(password\s*=\s*)('[^']*'|\S+)", re.IGNORECASE),
    re.compile(r"(://[^:/@\s]+:)([^@\s]+)(@)"),
)


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved generator settings."""

    driver: str = DEFAULT_DRIVER
    connection: str = DEFAULT_CONNECTION
    tables: tuple[str, ...] = ()
    schema: str = DEFAULT_SCHEMA
    package: str = DEFAULT_PACKAGE
    output: Path | None = None
    type_overrides: Mapping[str, str] = field(default_factory=dict)

    @property
    def dsn(self) -> str:
        """The connection string with environment variables expanded."""
        return os.path.expandvars(self.connection)


def mask_connection(connection: str) -> str:
    """Hide passwords in a connection string so it can be logged."""
    masked = _PASSWORD_PATTERNS[0].sub(r"\1****", connection)
    return _PASSWORD_PATTERNS[1].sub(r"\1****\3", masked)


def load_config_file(config_path: Path) -> dict[str, Any]:
    """Load and validate a YAML config file.

    Args:
        config_path: Path to the config file.

    Returns:
        The parsed config mapping.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {e}", str(config_path)) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}", str(config_path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config root must be a mapping", str(config_path))

    unknown = sorted(set(data) - _CONFIG_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}", str(config_path))

    types = data.get("types", {})
    if not isinstance(types, dict):
        raise ConfigError("'types' must map SQL type names to Go types", str(config_path))

    tables = data.get("tables")
    if tables is not None and not isinstance(tables, (str, list)):
        raise ConfigError("'tables' must be a list or a comma separated string", str(config_path))

    return data


def _tables_from(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return split_table_list(value)


def resolve_settings(
    *,
    driver: str | None = None,
    connection: str | None = None,
    tables: str | None = None,
    schema: str | None = None,
    package: str | None = None,
    output: Path | None = None,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Merge flags, environment, config file and defaults into Settings.

    Raises:
        ConfigError: If the config file is invalid.
    """
    env = os.environ if environ is None else environ
    file_values = load_config_file(config_path) if config_path else {}

    def pick(flag: str | None, key: str, default: str) -> str:
        if flag:
            return flag
        env_value = env.get(f"{ENV_PREFIX}{key.upper()}")
        if env_value:
            return env_value
        if file_values.get(key):
            return str(file_values[key])
        return default

    if tables:
        table_list = split_table_list(tables)
    elif env.get(f"{ENV_PREFIX}TABLES"):
        table_list = split_table_list(env[f"{ENV_PREFIX}TABLES"])
    else:
        table_list = _tables_from(file_values.get("tables"))

    return Settings(
        driver=pick(driver, "driver", DEFAULT_DRIVER),
        connection=pick(connection, "connection", DEFAULT_CONNECTION),
        tables=tuple(table_list),
        schema=pick(schema, "schema", DEFAULT_SCHEMA),
        package=pick(package, "package", DEFAULT_PACKAGE),
        output=output,
        type_overrides={
            str(name): str(mapped)
            for name, mapped in file_values.get("types", {}).items()
        },
    )
