"""Struct Code Generator - Generates Go record structs from a database catalog."""

from .main import (
    FieldDescription,
    TableDescription,
    GenerationResult,
    GeneratorContext,
    TEMPLATE_HELPERS,
    annotate,
    build_field,
    introspect_table,
    render_header,
    render_table,
    generate,
)

__all__ = [
    "FieldDescription",
    "TableDescription",
    "GenerationResult",
    "GeneratorContext",
    "TEMPLATE_HELPERS",
    "annotate",
    "build_field",
    "introspect_table",
    "render_header",
    "render_table",
    "generate",
]
