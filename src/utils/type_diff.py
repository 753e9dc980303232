"""
Type Definition Diff
=====================
Reads rendered type definitions (``type Name = { ... };``) back into fields
and diffs two of them. Used when only the stored type strings of two
snapshots are available, not their schema trees.

Both render formats are accepted, and the same type rendered inline and
multi-line compares as equal.
"""

import json
import logging
import re
from typing import Dict, List, Optional

logger = logging.getLogger("schema_platform")

_DEFINITION = re.compile(r"=\s*(.+?);?\s*$", re.DOTALL)
_FIELD = re.compile(r'^("(?:[^"\\]|\\.)*"|[\w$]+)(\?)?:\s*(.+)$', re.DOTALL)


class ParsedField:
    __slots__ = ("type", "optional")

    def __init__(self, type: str, optional: bool):
        self.type     = type
        self.optional = optional

    def display(self) -> str:
        return self.type + ("?" if self.optional else "")

    def __eq__(self, other) -> bool:
        if not isinstance(other, ParsedField):
            return NotImplemented
        return self.optional == other.optional and normalize_type(self.type) == normalize_type(other.type)

    def __repr__(self) -> str:
        return f"ParsedField({self.display()!r})"

    def to_dict(self) -> Dict:
        return {"type": self.type, "optional": self.optional}


class FieldChange:
    __slots__ = ("field", "before", "after")

    def __init__(self, field: str, before: ParsedField, after: ParsedField):
        self.field  = field
        self.before = before
        self.after  = after

    def to_dict(self) -> Dict:
        return {"field": self.field, "from": self.before.to_dict(), "to": self.after.to_dict()}


class SchemaDiff:
    """Top-level field differences between two type definitions."""

    def __init__(self, added: List[str], removed: List[str], changed: List[FieldChange]):
        self.added   = added
        self.removed = removed
        self.changed = changed

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.changed)

    def to_dict(self) -> Dict:
        return {
            "added":   self.added,
            "removed": self.removed,
            "changed": [c.to_dict() for c in self.changed],
        }


class DetailedChange:
    """One change at any nesting depth. ``change`` is added | removed | modified."""
    __slots__ = ("path", "change", "before", "after")

    ADDED    = "added"
    REMOVED  = "removed"
    MODIFIED = "modified"

    def __init__(self, path: str, change: str, before: Optional[str] = None, after: Optional[str] = None):
        self.path   = path
        self.change = change
        self.before = before
        self.after  = after

    def to_dict(self) -> Dict:
        return {"path": self.path, "change": self.change, "from": self.before, "to": self.after}

    def __repr__(self) -> str:
        return f"DetailedChange({self.change} {self.path!r}: {self.before!r} -> {self.after!r})"


# ──────────────────────────────────────────────────────────────────────────────
# PARSING
# ──────────────────────────────────────────────────────────────────────────────

def normalize_type(type_text: str) -> str:
    """Canonical spelling so inline and multi-line renderings compare equal."""
    t = re.sub(r"\s+", " ", type_text).strip()
    t = re.sub(r";\s*}", " }", t)
    t = re.sub(r"\{\s*", "{ ", t)
    t = re.sub(r"\s*\}", " }", t)
    t = t.replace("{ }", "{}")
    return t.rstrip(";").strip()


def split_type_fields(body: str) -> List[str]:
    """Split an object body on top-level ';' (nested braces/brackets and quoted keys respected)."""
    fields = []
    current = []
    depth = 0
    in_string = False
    escaped = False

    for char in body:
        if in_string:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in "{[(":
            depth += 1
        elif char in "}])":
            depth -= 1
        elif char == ";" and depth == 0:
            fields.append("".join(current))
            current = []
            continue
        current.append(char)

    if "".join(current).strip():
        fields.append("".join(current))
    return fields


def _parse_fields(body: str) -> Dict[str, ParsedField]:
    parsed: Dict[str, ParsedField] = {}
    for field in split_type_fields(body):
        match = _FIELD.match(field.strip())
        if not match:
            continue
        key, optional_marker, type_text = match.groups()
        if key.startswith('"'):
            key = json.loads(key)
        parsed[key] = ParsedField(type_text.strip(), bool(optional_marker))
    return parsed


def _is_object_type(type_text: str) -> bool:
    t = type_text.strip()
    return t.startswith("{") and t.endswith("}")


def parse_type_definition(text: str) -> Dict[str, ParsedField]:
    """
    Top-level fields of ``type Name = { ... };``.

    Returns {} (and logs a warning) when the text is not a type definition.
    """
    match = _DEFINITION.search(text or "")
    if not match:
        logger.warning(f"⚠️ Could not parse type definition: {text!r}")
        return {}

    body = match.group(1).strip()
    if _is_object_type(body):
        body = body[1:-1].strip()
    return _parse_fields(body)


# ──────────────────────────────────────────────────────────────────────────────
# DIFFING
# ──────────────────────────────────────────────────────────────────────────────

def compare_type_definitions(before: str, after: str) -> SchemaDiff:
    """Added, removed and changed top-level fields from ``before`` to ``after``."""
    fields_a = parse_type_definition(before)
    fields_b = parse_type_definition(after)

    removed = [k for k in fields_a if k not in fields_b]
    added = [k for k in fields_b if k not in fields_a]
    changed = [
        FieldChange(k, fields_a[k], fields_b[k])
        for k in fields_a
        if k in fields_b and fields_a[k] != fields_b[k]
    ]
    return SchemaDiff(added, removed, changed)


def _join(base: str, key: str) -> str:
    return f"{base}.{key}" if base else key


def _compare_nested(type_a: str, type_b: str, base_path: str) -> List[DetailedChange]:
    if not (_is_object_type(type_a) and _is_object_type(type_b)):
        if normalize_type(type_a) != normalize_type(type_b):
            return [DetailedChange(base_path, DetailedChange.MODIFIED, type_a, type_b)]
        return []

    fields_a = _parse_fields(type_a.strip()[1:-1])
    fields_b = _parse_fields(type_b.strip()[1:-1])
    changes: List[DetailedChange] = []

    for key, field in fields_a.items():
        if key not in fields_b:
            changes.append(DetailedChange(_join(base_path, key), DetailedChange.REMOVED, before=field.display()))

    for key, field in fields_b.items():
        if key not in fields_a:
            changes.append(DetailedChange(_join(base_path, key), DetailedChange.ADDED, after=field.display()))

    for key, field_a in fields_a.items():
        field_b = fields_b.get(key)
        if field_b is None:
            continue
        path = _join(base_path, key)
        if _is_object_type(field_a.type) and _is_object_type(field_b.type):
            changes.extend(_compare_nested(field_a.type, field_b.type, path))
            if field_a.optional != field_b.optional:
                changes.append(DetailedChange(path, DetailedChange.MODIFIED, field_a.display(), field_b.display()))
        elif field_a != field_b:
            changes.append(DetailedChange(path, DetailedChange.MODIFIED, field_a.display(), field_b.display()))

    return changes


def detailed_type_changes(before: str, after: str) -> List[DetailedChange]:
    """
    Every change between two type definitions, descending into nested
    object types. Fields that were added or removed wholesale as nested
    objects are reported leaf by leaf.
    """
    diff = compare_type_definitions(before, after)
    fields_a = parse_type_definition(before)
    fields_b = parse_type_definition(after)
    changes: List[DetailedChange] = []

    for key in diff.added:
        field = fields_b[key]
        nested = _compare_nested("{}", field.type, key) if _is_object_type(field.type) else []
        changes.extend(nested or [DetailedChange(key, DetailedChange.ADDED, after=field.display())])

    for key in diff.removed:
        field = fields_a[key]
        nested = _compare_nested(field.type, "{}", key) if _is_object_type(field.type) else []
        changes.extend(nested or [DetailedChange(key, DetailedChange.REMOVED, before=field.display())])

    for change in diff.changed:
        before_field, after_field = change.before, change.after
        if _is_object_type(before_field.type) and _is_object_type(after_field.type):
            changes.extend(_compare_nested(before_field.type, after_field.type, change.field))
            if before_field.optional != after_field.optional:
                changes.append(DetailedChange(
                    change.field, DetailedChange.MODIFIED, before_field.display(), after_field.display()
                ))
        else:
            changes.append(DetailedChange(
                change.field, DetailedChange.MODIFIED, before_field.display(), after_field.display()
            ))

    return changes


def format_type_diff(changes: List[DetailedChange]) -> str:
    """Grouped plain-text report of detailed changes."""
    if not changes:
        return "✅ Schema is identical - no changes detected"

    added = [c for c in changes if c.change == DetailedChange.ADDED]
    removed = [c for c in changes if c.change == DetailedChange.REMOVED]
    modified = [c for c in changes if c.change == DetailedChange.MODIFIED]

    lines = []
    if added:
        lines.append(f"✅ Added Fields ({len(added)}):")
        lines.extend(f"  + {c.path}: {c.after}" for c in added)
        lines.append("")
    if removed:
        lines.append(f"❌ Removed Fields ({len(removed)}):")
        lines.extend(f"  - {c.path}: {c.before}" for c in removed)
        lines.append("")
    if modified:
        lines.append(f"⚠️ Modified Fields ({len(modified)}):")
        lines.extend(f"  ~ {c.path}: {c.before} → {c.after}" for c in modified)
        lines.append("")

    return "\n".join(lines).rstrip("\n")
