"""
Schema Learner
===============
Derives a structural SchemaNode tree from a parsed JSON value, and merges two
trees describing the same logical entity into one generalized schema.

The merge is the tolerance model of the whole engine:
  - null is NOT a type once paired with a real one. Seeing null marks the
    node optional=True and keeps the other side's shape.
  - undefined carries no information and simply disappears in a merge.
  - Different primitive kinds become a union of kind labels.
  - object/array vs anything else collapses to a union of top-level labels.
    Structural detail is lost on purpose: validation relies on unions only
    ever being checked at their own level.
  - Keys seen in only some object samples become optional.

Arrays are learned from ALL their elements, folded left-to-right through the
merge, so lists of mixed-shape records yield one representative item schema.
"""

from typing import Any

from core.errors import SchemaDepthError
from utils.schema_model import SchemaKind, SchemaNode, empty_object_node, kind_of


# ──────────────────────────────────────────────────────────────────────────────
# GENERATION
# ──────────────────────────────────────────────────────────────────────────────

def generate_schema(value: Any, max_depth: int = 200) -> SchemaNode:
    """
    Build the schema tree for one observed value.

    Raises:
        SchemaDepthError:      nesting deeper than ``max_depth``
        UnsupportedValueError: a value that parsed JSON cannot contain
    """
    return _generate(value, max_depth, 0, "")


def _generate(value: Any, max_depth: int, depth: int, path: str) -> SchemaNode:
    if depth > max_depth:
        raise SchemaDepthError(max_depth, path)

    kind = kind_of(value)

    if kind == SchemaKind.OBJECT:
        properties = {}
        for key, child in value.items():
            child_path = f"{path}.{key}" if path else str(key)
            properties[str(key)] = _generate(child, max_depth, depth + 1, child_path)
        return SchemaNode(SchemaKind.OBJECT, properties=properties)

    if kind == SchemaKind.ARRAY:
        if not value:
            return SchemaNode(SchemaKind.ARRAY, items=empty_object_node())
        items = _generate(value[0], max_depth, depth + 1, f"{path}[0]")
        for i in range(1, len(value)):
            items = merge_schema_nodes(
                items, _generate(value[i], max_depth, depth + 1, f"{path}[{i}]")
            )
        return SchemaNode(SchemaKind.ARRAY, items=items)

    return SchemaNode(kind)


# ──────────────────────────────────────────────────────────────────────────────
# MERGING
# ──────────────────────────────────────────────────────────────────────────────

def merge_schema_nodes(a: SchemaNode, b: SchemaNode) -> SchemaNode:
    """
    Unify two schema nodes. Pure and total: every pair has a defined merge
    and neither input is modified.
    """
    # 1. null pairs with a real type → the real type, now optional
    if a.kind == SchemaKind.NULL and b.kind != SchemaKind.NULL:
        return b.with_optional(True)
    if b.kind == SchemaKind.NULL and a.kind != SchemaKind.NULL:
        return a.with_optional(True)

    optional = a.optional or b.optional

    # 2. Kind mismatch
    if a.kind != b.kind:
        if a.kind == SchemaKind.UNDEFINED:
            return b
        if b.kind == SchemaKind.UNDEFINED:
            return a
        return SchemaNode(
            SchemaKind.UNION,
            alternatives=_labels(a) + _labels(b),
            optional=optional,
        )

    # 3. Same kind
    if a.kind == SchemaKind.OBJECT:
        return SchemaNode(
            SchemaKind.OBJECT,
            properties=_merge_properties(a.properties, b.properties),
            optional=optional,
        )

    if a.kind == SchemaKind.ARRAY:
        if a.items is not None and b.items is not None:
            items = merge_schema_nodes(a.items, b.items)
        else:
            items = a.items if a.items is not None else b.items
        return SchemaNode(SchemaKind.ARRAY, items=items, optional=optional)

    if a.kind == SchemaKind.UNION:
        return SchemaNode(
            SchemaKind.UNION,
            alternatives=a.alternatives + b.alternatives,
            optional=optional,
        )

    return SchemaNode(a.kind, optional=optional)


def _labels(node: SchemaNode) -> tuple:
    """Kind labels a node contributes to a union (flattening nested unions)."""
    if node.kind == SchemaKind.UNION:
        return node.alternatives
    return (node.kind,)


def _merge_properties(left: dict, right: dict) -> dict:
    merged = {}
    for key, node in left.items():
        if key in right:
            merged[key] = merge_schema_nodes(node, right[key])
        else:
            merged[key] = node.with_optional(True)
    for key, node in right.items():
        if key not in left:
            merged[key] = node.with_optional(True)
    return merged
