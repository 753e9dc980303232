"""
Type Exporter: Render Schemas as Type Definitions
====================================================
Converts a SchemaNode tree into a TypeScript-style type description, either
multi-line/indented or single-line/inline:

  multiline:                        inline:
    type User = {                     type User = { id: number; tags: string[] };
      id: number;
      tags: string[];
    };

Optional properties get both the `?` marker and an explicit `| null` so
nullability is visible independently of "key may be missing".

Pure presentation: nothing here feeds back into generation or validation.
"""

import json
import re

from core.errors import InvalidFormatError
from utils.schema_model import SchemaKind, SchemaNode

MULTILINE = "multiline"
INLINE = "inline"
FORMATS = (MULTILINE, INLINE)

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


# ──────────────────────────────────────────────────────
# NAMING HELPERS
# ──────────────────────────────────────────────────────

def _property_key(key: str) -> str:
    """Keys that are not identifiers are quoted, as TypeScript requires."""
    if _IDENTIFIER.match(key):
        return key
    return json.dumps(key)


def _property_type(node: SchemaNode, rendered: str) -> str:
    if node.optional and node.kind not in (SchemaKind.NULL, SchemaKind.UNION):
        return f"{rendered} | null"
    return rendered


def _check_format(format: str) -> str:
    if format is not None and not isinstance(format, str):
        raise InvalidFormatError(f"Invalid format {format!r}. Allowed: {', '.join(FORMATS)}")
    fmt = (format or MULTILINE).lower()
    if fmt not in FORMATS:
        raise InvalidFormatError(
            f"Invalid format '{format}'. Allowed: {', '.join(FORMATS)}"
        )
    return fmt


# ──────────────────────────────────────────────────────
# RENDERERS
# ──────────────────────────────────────────────────────

def schema_to_typescript(schema: SchemaNode, indent: int = 0) -> str:
    """Multi-line rendering; nested objects are indented two spaces per level."""
    kind = schema.kind

    if kind == SchemaKind.UNION:
        return " | ".join(schema.alternatives)

    if kind in SchemaKind.PRIMITIVES:
        return kind

    if kind == SchemaKind.ARRAY:
        if schema.items is None:
            return "any[]"
        return f"{_wrap_union(schema.items, schema_to_typescript(schema.items, indent))}[]"

    if kind == SchemaKind.OBJECT:
        if not schema.properties:
            return "{}"
        spaces = " " * indent
        lines = []
        for key, child in schema.properties.items():
            marker = "?" if child.optional else ""
            rendered = _property_type(child, schema_to_typescript(child, indent + 2))
            lines.append(f"{spaces}  {_property_key(key)}{marker}: {rendered};")
        body = "\n".join(lines)
        return f"{{\n{body}\n{spaces}}}"

    raise ValueError(f"Unknown schema kind: {kind!r}")


def schema_to_typescript_inline(schema: SchemaNode) -> str:
    """Single-line rendering: { a: number; b?: string | null }"""
    kind = schema.kind

    if kind == SchemaKind.UNION:
        return " | ".join(schema.alternatives)

    if kind in SchemaKind.PRIMITIVES:
        return kind

    if kind == SchemaKind.ARRAY:
        if schema.items is None:
            return "any[]"
        return f"{_wrap_union(schema.items, schema_to_typescript_inline(schema.items))}[]"

    if kind == SchemaKind.OBJECT:
        if not schema.properties:
            return "{}"
        props = []
        for key, child in schema.properties.items():
            marker = "?" if child.optional else ""
            rendered = _property_type(child, schema_to_typescript_inline(child))
            props.append(f"{_property_key(key)}{marker}: {rendered}")
        return "{ " + "; ".join(props) + " }"

    raise ValueError(f"Unknown schema kind: {kind!r}")


def _wrap_union(items: SchemaNode, rendered: str) -> str:
    # (number | string)[] needs parentheses: `number | string[]` means something else
    if items.kind == SchemaKind.UNION and len(items.alternatives) > 1:
        return f"({rendered})"
    return rendered


def render_schema(schema: SchemaNode, format: str = MULTILINE) -> str:
    """Render a schema tree in the requested format."""
    if _check_format(format) == INLINE:
        return schema_to_typescript_inline(schema)
    return schema_to_typescript(schema)


def render_type_definition(name: str, schema: SchemaNode, format: str = MULTILINE) -> str:
    """Full declaration: ``type Name = <type>;``"""
    return f"type {name} = {render_schema(schema, format)};"
