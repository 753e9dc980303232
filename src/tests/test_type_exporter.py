"""
Type definition rendering in both formats.
"""
import pytest

from core.errors import InvalidFormatError
from utils.schema_learner import generate_schema
from utils.type_exporter import render_schema, render_type_definition


def test_multiline_object():
    schema = generate_schema({"a": 1, "b": "x"})
    assert render_type_definition("Sample", schema) == "type Sample = {\n  a: number;\n  b: string;\n};"


def test_inline_object():
    schema = generate_schema({"a": 1, "b": "x"})
    assert render_type_definition("Sample", schema, "inline") == "type Sample = { a: number; b: string };"


def test_nested_multiline_indentation():
    schema = generate_schema({"user": {"id": 1, "tags": ["x"]}})
    assert render_schema(schema) == (
        "{\n"
        "  user: {\n"
        "    id: number;\n"
        "    tags: string[];\n"
        "  };\n"
        "}"
    )


def test_optional_fields_show_null():
    schema = generate_schema([{"a": 1, "o": {"k": True}}, {"a": None}])
    assert render_schema(schema, "inline") == "{ a?: number | null; o?: { k: boolean } | null }[]"


def test_union_fields_render_alternatives_only():
    schema = generate_schema([{"a": 1}, {"a": "x"}])
    assert render_schema(schema, "inline") == "{ a: number | string }[]"


def test_union_items_are_parenthesised():
    assert render_schema(generate_schema([1, "x"]), "inline") == "(number | string)[]"


def test_empty_shapes():
    assert render_schema(generate_schema({})) == "{}"
    assert render_schema(generate_schema([]), "inline") == "{}[]"
    assert render_schema(generate_schema({"list": []}), "inline") == "{ list: {}[] }"


def test_primitives_at_root():
    assert render_schema(generate_schema("x")) == "string"
    assert render_schema(generate_schema(None)) == "null"


def test_non_identifier_keys_are_quoted():
    schema = generate_schema({"first-name": "x", "ok_key": 1})
    assert render_schema(schema, "inline") == '{ "first-name": string; ok_key: number }'


def test_unknown_format_rejected():
    with pytest.raises(InvalidFormatError):
        render_schema(generate_schema({"a": 1}), "yaml")


def test_non_string_format_rejected():
    with pytest.raises(InvalidFormatError):
        render_schema(generate_schema({"a": 1}), 5)
