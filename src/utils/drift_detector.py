"""
Contract Drift Detection Engine
================================
Validates real API responses against a previously derived schema and reports
structural drift as data.

Two tiers:
  - ERRORS   (BREAKING): type mismatch, missing required field.
  - WARNINGS (INFO):     extra field not present in the reference schema.

Validation never stops at the first problem: every finding in the whole tree
is accumulated. Paths use dotted/bracketed notation rooted at "":
    user.addresses[2].zip

Also provides the plain-English narrator used for logs and the CLI report.
"""

from typing import Any, Dict, List, Tuple

from core.errors import SchemaDepthError
from utils.schema_model import UNDEFINED, SchemaKind, SchemaNode, kind_of

EXTRA_FIELD_MESSAGE = "Extra field not in schema"


# ──────────────────────────────────────────────────────────────────────────────
# FINDINGS
# ──────────────────────────────────────────────────────────────────────────────

def _jsonable(value: Any) -> Any:
    return None if value is UNDEFINED else value


class ValidationError:
    """A hard structural mismatch (breaking)."""
    __slots__ = ("path", "expected", "actual", "value")

    def __init__(self, path: str, expected: str, actual: str, value: Any):
        self.path     = path
        self.expected = expected
        self.actual   = actual
        self.value    = value

    @property
    def message(self) -> str:
        return f"Error at {self.path}: expected {self.expected}, got {self.actual}"

    def to_dict(self) -> Dict:
        return {
            "path":     self.path,
            "expected": self.expected,
            "actual":   self.actual,
            "value":    _jsonable(self.value),
        }

    def __repr__(self) -> str:
        return f"ValidationError({self.path!r}, expected={self.expected!r}, actual={self.actual!r})"


class ValidationWarning:
    """A non-breaking observation (currently: extra fields)."""
    __slots__ = ("path", "message_text", "value")

    def __init__(self, path: str, message: str, value: Any):
        self.path         = path
        self.message_text = message
        self.value        = value

    @property
    def message(self) -> str:
        return f"Warning at {self.path}: {self.message_text}"

    def to_dict(self) -> Dict:
        return {
            "path":    self.path,
            "message": self.message_text,
            "value":   _jsonable(self.value),
        }

    def __repr__(self) -> str:
        return f"ValidationWarning({self.path!r}, {self.message_text!r})"


class ValidationResult:
    """Classified outcome of validating one value against one schema."""

    def __init__(self, errors: List[ValidationError], warnings: List[ValidationWarning]):
        self.errors   = errors
        self.warnings = warnings

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def summary(self) -> Dict[str, int]:
        return {"error_count": len(self.errors), "warning_count": len(self.warnings)}

    @property
    def error_messages(self) -> List[str]:
        return [e.message for e in self.errors]

    @property
    def warning_messages(self) -> List[str]:
        return [w.message for w in self.warnings]

    def to_dict(self) -> Dict:
        return {
            "is_valid":         self.is_valid,
            "has_warnings":     self.has_warnings,
            "errors":           [e.to_dict() for e in self.errors],
            "warnings":         [w.to_dict() for w in self.warnings],
            "summary":          self.summary,
            "error_messages":   self.error_messages,
            "warning_messages": self.warning_messages,
        }


class SchemaComparison:
    """Compatibility of sample B with the schema of sample A."""

    def __init__(
        self,
        errors: List[ValidationError],
        warnings: List[ValidationWarning],
        schema_a: SchemaNode,
        schema_b: SchemaNode,
    ):
        self.errors   = errors
        self.warnings = warnings
        self.schema_a = schema_a
        self.schema_b = schema_b

    @property
    def is_compatible(self) -> bool:
        # Warnings are additive changes and never break compatibility
        return not self.errors

    def to_dict(self) -> Dict:
        return {
            "is_compatible": self.is_compatible,
            "errors":        [e.to_dict() for e in self.errors],
            "warnings":      [w.to_dict() for w in self.warnings],
            "schema_a":      self.schema_a.to_dict(),
            "schema_b":      self.schema_b.to_dict(),
        }


# ──────────────────────────────────────────────────────────────────────────────
# VALIDATOR
# ──────────────────────────────────────────────────────────────────────────────

def describe_kind(schema: SchemaNode) -> str:
    """Kind description used in 'expected' fields."""
    if schema.kind == SchemaKind.UNION:
        return " | ".join(schema.alternatives)
    return schema.kind


def validate_against_schema(
    value: Any,
    schema: SchemaNode,
    path: str = "",
    max_depth: int = 200,
) -> Tuple[List[ValidationError], List[ValidationWarning]]:
    """
    Walk ``value`` against ``schema`` depth-first.

    Returns:
        (errors, warnings) accumulated over the whole tree.
    """
    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []
    _validate(value, schema, path, errors, warnings, 0, max_depth)
    return errors, warnings


def _validate(
    value: Any,
    schema: SchemaNode,
    path: str,
    errors: List[ValidationError],
    warnings: List[ValidationWarning],
    depth: int,
    max_depth: int,
) -> None:
    if depth > max_depth:
        raise SchemaDepthError(max_depth, path)

    value_kind = kind_of(value)

    # ── Union: membership only, unions never have structure below them ───────
    if schema.kind == SchemaKind.UNION:
        if value_kind not in schema.alternatives:
            errors.append(ValidationError(path, describe_kind(schema), value_kind, value))
        return

    # ── null is an accepted terminal for optional fields ─────────────────────
    if value_kind == SchemaKind.NULL and schema.optional:
        return

    # ── Kind mismatch ────────────────────────────────────────────────────────
    if value_kind != schema.kind:
        expected = f"{schema.kind} | null" if schema.optional else schema.kind
        errors.append(ValidationError(path, expected, value_kind, value))
        return

    if schema.kind == SchemaKind.OBJECT:
        _validate_object(value, schema, path, errors, warnings, depth, max_depth)

    elif schema.kind == SchemaKind.ARRAY and schema.items is not None:
        for index, item in enumerate(value):
            _validate(item, schema.items, f"{path}[{index}]", errors, warnings, depth + 1, max_depth)


def _validate_object(
    value: Dict,
    schema: SchemaNode,
    path: str,
    errors: List[ValidationError],
    warnings: List[ValidationWarning],
    depth: int,
    max_depth: int,
) -> None:
    properties = schema.properties
    # Schema keys are always strings
    value_items = [(str(k), v) for k, v in value.items()]
    present = {key for key, _ in value_items}

    # Missing required fields (BREAKING)
    for key, field_schema in properties.items():
        if not field_schema.optional and key not in present:
            errors.append(ValidationError(
                _join(path, key), describe_kind(field_schema), "missing", UNDEFINED
            ))

    # Extra fields (INFO)
    for key, child in value_items:
        if key not in properties:
            warnings.append(ValidationWarning(_join(path, key), EXTRA_FIELD_MESSAGE, child))

    # Recurse into shared fields
    for key, child in value_items:
        if key in properties:
            _validate(child, properties[key], _join(path, key), errors, warnings, depth + 1, max_depth)


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def build_validation_result(value: Any, schema: SchemaNode, max_depth: int = 200) -> ValidationResult:
    """Validate and wrap the findings with summary counts and messages."""
    errors, warnings = validate_against_schema(value, schema, max_depth=max_depth)
    return ValidationResult(errors, warnings)


def error_result(message: str) -> ValidationResult:
    """One-error result used when the inputs themselves could not be processed."""
    return ValidationResult(
        [ValidationError("root", "valid JSON", "error", message)],
        [],
    )


# ──────────────────────────────────────────────────────────────────────────────
# CONTRACT CHANGE NARRATOR
# Converts findings into a plain-English report for logs and the CLI.
# ──────────────────────────────────────────────────────────────────────────────

_SEVERITY_LABELS = {
    "error":   "🔴 BREAKING",
    "warning": "🟢 INFO",
}


def _display_path(path: str) -> str:
    return path or "(root)"


def format_validation_summary(result: ValidationResult) -> str:
    """One-line summary, e.g. '2 breaking change(s), 1 new field(s)'."""
    if result.is_valid and not result.has_warnings:
        return "No drift detected"

    parts = []
    if result.errors:
        parts.append(f"{len(result.errors)} breaking change(s)")
    if result.warnings:
        parts.append(f"{len(result.warnings)} new field(s)")
    return ", ".join(parts)


def narrate_validation(result: ValidationResult, label: str = "") -> str:
    """
    Multi-line human-readable report of a ValidationResult.

    Args:
        result: Output of build_validation_result() or the service.
        label:  Optional context, e.g. the cached schema name.
    """
    for_label = f" for {label}" if label else ""
    if result.is_valid and not result.has_warnings:
        return f"✅ No contract changes detected{for_label}. The response matches the schema."

    lines = [
        f"⚠️ Contract Change Detected{for_label}",
        f"   {len(result.errors) + len(result.warnings)} change(s) found: "
        f"{len(result.errors)} breaking, {len(result.warnings)} informational",
        "",
    ]

    idx = 0
    for error in result.errors:
        idx += 1
        if error.actual == "missing":
            headline = f'The "{_display_path(error.path)}" field has been REMOVED (expected {error.expected})'
        else:
            headline = f'"{_display_path(error.path)}" CHANGED TYPE from {error.expected} to {error.actual}'
        lines.append(f"  {idx}. {_SEVERITY_LABELS['error']}: {headline}")
        lines.append(f"     📍 Location: {_display_path(error.path)}")
        lines.append("")

    for warning in result.warnings:
        idx += 1
        lines.append(
            f'  {idx}. {_SEVERITY_LABELS["warning"]}: A new "{_display_path(warning.path)}" '
            f"field has APPEARED ({warning.message_text.lower()})"
        )
        lines.append(f"     📍 Location: {_display_path(warning.path)}")
        lines.append("")

    if result.errors:
        lines.append("━" * 40)
        lines.append(f"🚨 {len(result.errors)} breaking change(s) require consumer updates.")
        lines.append(f"   Affected paths: {', '.join(_display_path(e.path) for e in result.errors)}")

    return "\n".join(lines).rstrip("\n")
