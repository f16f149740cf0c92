#!/usr/bin/env python3
"""
Command line interface for schema2struct.

Usage:
    python -m schema2struct <command> [options]

Commands:
    generate    Generate Go structs for the tables of a database
    tables      List the tables a generation run would process

Examples:
    python -m schema2struct generate -c "dbname=app sslmode=disable"
    python -m schema2struct generate -t users,orders -o model/tables.go
    python -m schema2struct tables --config schema2struct.yaml
"""

from __future__ import annotations

import importlib
import sys
from typing import Callable


def _run(entry: Callable[[list[str]], None], args: list[str]) -> int:
    try:
        entry(args)
        return 0
    except SystemExit as e:
        if e.code is None:
            return 0
        return e.code if isinstance(e.code, int) else 1


def cmd_generate(args: list[str]) -> int:
    """Generate Go structs."""
    codegen = importlib.import_module("schema2struct.struct_codegen.main")
    return _run(codegen.main, args)


def cmd_tables(args: list[str]) -> int:
    """List tables."""
    codegen = importlib.import_module("schema2struct.struct_codegen.main")
    return _run(codegen.tables_main, args)


COMMANDS = {
    "generate": (cmd_generate, "Generate Go structs for the tables of a database"),
    "tables": (cmd_tables, "List the tables a generation run would process"),
}


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    if not argv or argv[0] in ("-h", "--help"):
        print(__doc__)
        print("Available commands:")
        for name, (_, desc) in COMMANDS.items():
            print(f"  {name:12} {desc}")
        print("\nUse '<command> --help' for command-specific options.")
        return 0

    command = argv[0]
    args = argv[1:]

    if command not in COMMANDS:
        print(f"Unknown command: {command}")
        print(f"Available commands: {', '.join(COMMANDS.keys())}")
        return 1

    handler, _ = COMMANDS[command]
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
