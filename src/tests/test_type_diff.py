"""
Parsing and diffing of rendered type definitions.
"""
from utils.schema_learner import generate_schema
from utils.type_diff import (
    DetailedChange,
    compare_type_definitions,
    detailed_type_changes,
    format_type_diff,
    parse_type_definition,
)
from utils.type_exporter import render_type_definition

BEFORE = {"id": 1, "name": "Ada", "address": {"city": "Paris"}}
AFTER = {"id": "1", "address": {"city": "Paris", "zip": "75001"}, "email": "ada@example.org"}


def _render(value, fmt="multiline"):
    return render_type_definition("User", generate_schema(value), fmt)


def test_parse_both_formats():
    for fmt in ("multiline", "inline"):
        fields = parse_type_definition(_render(BEFORE, fmt))
        assert list(fields) == ["id", "name", "address"], fmt
        assert fields["id"].type == "number"
        assert not fields["id"].optional


def test_parse_optional_and_quoted_keys():
    fields = parse_type_definition('type T = { "first-name"?: string | null; n: number };')
    assert fields["first-name"].optional
    assert fields["first-name"].type == "string | null"
    assert fields["n"].type == "number"


def test_unparseable_text_gives_no_fields():
    assert parse_type_definition("not a type") == {}


def test_same_type_in_both_formats_is_identical():
    diff = compare_type_definitions(_render(BEFORE, "inline"), _render(BEFORE, "multiline"))
    assert diff.is_empty
    assert detailed_type_changes(_render(BEFORE, "inline"), _render(BEFORE)) == []


def test_top_level_diff():
    diff = compare_type_definitions(_render(BEFORE), _render(AFTER))
    assert diff.added == ["email"]
    assert diff.removed == ["name"]
    assert [c.field for c in diff.changed] == ["id", "address"]


def test_detailed_changes_descend_into_objects():
    changes = detailed_type_changes(_render(BEFORE), _render(AFTER))
    summary = [(c.path, c.change, c.before, c.after) for c in changes]
    assert summary == [
        ("email", DetailedChange.ADDED, None, "string"),
        ("name", DetailedChange.REMOVED, "string", None),
        ("id", DetailedChange.MODIFIED, "number", "string"),
        ("address.zip", DetailedChange.ADDED, None, "string"),
    ]


def test_added_nested_object_reported_leaf_by_leaf():
    changes = detailed_type_changes(
        "type T = { id: number };",
        "type T = { id: number; meta: { v: number; tag: string } };",
    )
    assert [(c.path, c.change) for c in changes] == [
        ("meta.v", DetailedChange.ADDED),
        ("meta.tag", DetailedChange.ADDED),
    ]


def test_optionality_change_is_a_modification():
    changes = detailed_type_changes("type T = { a: number };", "type T = { a?: number | null };")
    assert len(changes) == 1
    assert changes[0].change == DetailedChange.MODIFIED
    assert changes[0].path == "a"


def test_report():
    report = format_type_diff(detailed_type_changes(_render(BEFORE), _render(AFTER)))
    assert "Added Fields (2)" in report
    assert "+ address.zip: string" in report
    assert "Removed Fields (1)" in report
    assert "~ id: number → string" in report
    assert format_type_diff([]).startswith("✅")
