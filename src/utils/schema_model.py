"""
Schema Model
=============
The single recursive structure every part of the engine works on.

Internal schema node (``SchemaNode.to_dict()``):
{
  "kind":         "object",                 ← one of SchemaKind.ALL
  "optional":     true,                     ← only written when set
  "properties":   { "field": { ...node } }, ← object only
  "items":        { ...node },              ← array only
  "alternatives": ["number", "string"]      ← union only
}

Nodes are never mutated after construction. Merging always builds new nodes.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional, Tuple

from core.errors import UnsupportedValueError


# ──────────────────────────────────────────────────────────────────────────────
# KINDS
# ──────────────────────────────────────────────────────────────────────────────

class SchemaKind:
    STRING    = "string"
    NUMBER    = "number"
    BOOLEAN   = "boolean"
    NULL      = "null"
    UNDEFINED = "undefined"
    OBJECT    = "object"
    ARRAY     = "array"
    UNION     = "union"

    PRIMITIVES = frozenset({STRING, NUMBER, BOOLEAN, NULL, UNDEFINED})
    ALL = PRIMITIVES | {OBJECT, ARRAY, UNION}


class _Undefined:
    """Stand-in for a value that carries no type information at all."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


def kind_of(value: Any) -> str:
    """Classify a parsed-JSON value. bool is checked before numbers (bool is an int)."""
    if value is None:
        return SchemaKind.NULL
    if value is UNDEFINED:
        return SchemaKind.UNDEFINED
    if isinstance(value, bool):
        return SchemaKind.BOOLEAN
    if isinstance(value, (int, float)):
        return SchemaKind.NUMBER
    if isinstance(value, str):
        return SchemaKind.STRING
    if isinstance(value, (list, tuple)):
        return SchemaKind.ARRAY
    if isinstance(value, Mapping):
        return SchemaKind.OBJECT
    raise UnsupportedValueError(
        f"Cannot derive a schema from {type(value).__name__} values"
    )


def _check_kind(kind: str) -> str:
    if not isinstance(kind, str) or kind not in SchemaKind.ALL:
        raise ValueError(f"Unknown schema kind: {kind!r}")
    return kind


# ──────────────────────────────────────────────────────────────────────────────
# SCHEMA NODE
# ──────────────────────────────────────────────────────────────────────────────

class SchemaNode:
    """
    Structural type of one JSON value.

    Attributes:
        kind:          One of SchemaKind.ALL
        properties:    Child nodes by key (object only, otherwise None)
        items:         Unified element node (array only, otherwise None)
        alternatives:  Primitive kind labels (union only, otherwise ())
        optional:      Value may be absent or null across observations
    """
    __slots__ = ("kind", "properties", "items", "alternatives", "optional")

    def __init__(
        self,
        kind: str,
        properties: Optional[Dict[str, "SchemaNode"]] = None,
        items: Optional["SchemaNode"] = None,
        alternatives: Iterable[str] = (),
        optional: bool = False,
    ):
        _check_kind(kind)
        alternatives = _dedupe(alternatives)

        if kind == SchemaKind.OBJECT:
            properties = dict(properties or {})
        elif properties:
            raise ValueError(f"'{kind}' node cannot carry properties")
        else:
            properties = None

        if items is not None and kind != SchemaKind.ARRAY:
            raise ValueError(f"'{kind}' node cannot carry items")

        if kind == SchemaKind.UNION:
            for alt in alternatives:
                _check_kind(alt)
            if SchemaKind.UNION in alternatives:
                raise ValueError("Union alternatives cannot contain 'union'")
        elif alternatives:
            raise ValueError(f"'{kind}' node cannot carry alternatives")

        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "properties", properties)
        object.__setattr__(self, "items", items)
        object.__setattr__(self, "alternatives", alternatives)
        object.__setattr__(self, "optional", bool(optional))

    def __setattr__(self, name, value):
        raise AttributeError("SchemaNode is immutable")

    # ── Copies ───────────────────────────────────────────────────────────────

    def with_optional(self, optional: bool = True) -> "SchemaNode":
        """Return a copy of this node with the optional flag replaced."""
        if self.optional == optional:
            return self
        return SchemaNode(
            self.kind,
            properties=self.properties,
            items=self.items,
            alternatives=self.alternatives,
            optional=optional,
        )

    # ── Equality / display ───────────────────────────────────────────────────

    def __eq__(self, other) -> bool:
        if not isinstance(other, SchemaNode):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.optional == other.optional
            and set(self.alternatives) == set(other.alternatives)
            and self.properties == other.properties
            and self.items == other.items
        )

    def __hash__(self):
        return hash((self.kind, self.optional, frozenset(self.alternatives)))

    def __repr__(self) -> str:
        return f"SchemaNode({self.to_dict()!r})"

    # ── Serialisation ────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"kind": self.kind}
        if self.optional:
            d["optional"] = True
        if self.kind == SchemaKind.OBJECT:
            d["properties"] = {k: v.to_dict() for k, v in self.properties.items()}
        elif self.kind == SchemaKind.ARRAY and self.items is not None:
            d["items"] = self.items.to_dict()
        elif self.kind == SchemaKind.UNION:
            d["alternatives"] = list(self.alternatives)
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SchemaNode":
        if not isinstance(d, Mapping) or "kind" not in d:
            raise ValueError(f"Not a schema node: {d!r}")
        props = d.get("properties")
        items = d.get("items")
        return cls(
            d["kind"],
            properties={k: cls.from_dict(v) for k, v in props.items()} if props else None,
            items=cls.from_dict(items) if items is not None else None,
            alternatives=d.get("alternatives") or (),
            optional=d.get("optional", False),
        )


def _dedupe(alternatives: Iterable[str]) -> Tuple[str, ...]:
    seen = []
    for alt in alternatives:
        if alt not in seen:
            seen.append(alt)
    return tuple(seen)


def empty_object_node() -> SchemaNode:
    """Open object shape used as the item type of an empty array."""
    return SchemaNode(SchemaKind.OBJECT, properties={})
