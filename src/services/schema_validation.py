"""
Schema Validation Service
==========================
Public face of the engine. Generates type definitions from JSON responses,
caches their schemas by name, and validates later responses for structural
drift.

Inputs may be parsed structures or raw JSON text (str/bytes); text is parsed
before any generation or validation step.

Error policy:
  - validate_response() compares two pieces of untrusted runtime data and
    ALWAYS returns a result: bad JSON becomes a one-error result.
  - A cache miss in validate_against_cached_schema() is a caller logic error
    and always raises SchemaNotFoundError.

Usage:
    service = SchemaValidationService()
    service.generate_type_definition(first_body, "GetUser")
    result = service.validate_against_cached_schema(next_body, "GetUser")
    if not result.is_valid:
        print("\n".join(result.error_messages))
"""

import json
import logging
from typing import Any, List, Optional, Tuple

from core import config
from core.errors import InvalidJSONError, SchemaNotFoundError, SchemaUsageError
from utils.drift_detector import (
    SchemaComparison,
    ValidationResult,
    build_validation_result,
    error_result,
    format_validation_summary,
    narrate_validation,
    validate_against_schema,
)
from utils.schema_learner import generate_schema, merge_schema_nodes
from utils.schema_model import SchemaNode
from utils.schema_registry import SchemaCache
from utils.type_diff import DetailedChange, SchemaDiff, compare_type_definitions, detailed_type_changes
from utils.type_exporter import render_type_definition

logger = logging.getLogger("schema_platform")


def parse_response_body(body: Any) -> Any:
    """Parse JSON text; anything else is assumed to be already parsed."""
    if isinstance(body, (bytes, bytearray)):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidJSONError(f"Response body is not UTF-8 text: {e}") from e
    if isinstance(body, str):
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise InvalidJSONError(str(e)) from e
    return body


class SchemaValidationService:
    """
    Owns one schema cache. Construct one per process (see core/state.py) or
    one per test for isolation.
    """

    def __init__(self, cache: Optional[SchemaCache] = None, max_depth: Optional[int] = None):
        self.cache = cache if cache is not None else SchemaCache()
        self.max_depth = max_depth or config.SCHEMA_MAX_DEPTH

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _schema_for(self, body: Any) -> Tuple[Any, SchemaNode]:
        data = parse_response_body(body)
        return data, generate_schema(data, self.max_depth)

    def _validate(self, data: Any, schema: SchemaNode) -> ValidationResult:
        return build_validation_result(data, schema, self.max_depth)

    # ── Generation ───────────────────────────────────────────────────────────

    def generate_type_definition(self, response_body: Any, type_name: str, format: Optional[str] = None) -> str:
        """
        Generate ``type <type_name> = ...;`` and cache the schema under
        ``type_name`` (overwriting any previous schema of that name).

        Raises:
            InvalidJSONError, InvalidFormatError, SchemaDepthError
        """
        _, definition = self.generate_and_cache(response_body, type_name, format)
        return definition

    def generate_and_cache(
        self, response_body: Any, type_name: str, format: Optional[str] = None
    ) -> Tuple[SchemaNode, str]:
        """Same as generate_type_definition() but also hands back the cached schema."""
        try:
            _, schema = self._schema_for(response_body)
        except InvalidJSONError as e:
            raise InvalidJSONError(f"Failed to generate type definition: {e}") from e

        definition = render_type_definition(type_name, schema, format or config.SCHEMA_DEFAULT_FORMAT)
        self.cache.set(type_name, schema)
        logger.info(f"🧬 Schema cached for '{type_name}'")
        return schema, definition

    def learn_response(self, type_name: str, response_body: Any) -> Tuple[SchemaNode, Optional[ValidationResult]]:
        """
        Fold one more observation into the schema cached under ``type_name``.

        The response is first validated against the previous schema (if any)
        so the caller sees the drift it introduced, then merged into it.

        Returns:
            (merged_schema, result); result is None on the first observation.
        """
        data, observed = self._schema_for(response_body)
        previous = self.cache.get(type_name)

        if previous is None:
            self.cache.set(type_name, observed)
            logger.info(f"🧬 First observation learned for '{type_name}'")
            return observed, None

        result = self._validate(data, previous)
        merged = merge_schema_nodes(previous, observed)
        self.cache.set(type_name, merged)

        if result.errors:
            logger.warning(f"🚨 CONTRACT DRIFT [{type_name}]: {format_validation_summary(result)}")
            logger.debug(f"\n{narrate_validation(result, type_name)}")
        elif result.warnings:
            logger.info(f"🟢 SCHEMA INFO [{type_name}]: {format_validation_summary(result)}")
        return merged, result

    # ── Validation ───────────────────────────────────────────────────────────

    def validate_response(self, new_response_body: Any, original_response_body: Any) -> ValidationResult:
        """
        Validate a new response against the schema of an original one.
        No caching side effect; never raises.
        """
        try:
            new_data = parse_response_body(new_response_body)
            _, original_schema = self._schema_for(original_response_body)
            return self._validate(new_data, original_schema)
        except (SchemaUsageError, RecursionError) as e:
            logger.warning(f"⚠️ validate_response could not process inputs: {e}")
            return error_result(str(e))

    def validate_against_cached_schema(self, response_body: Any, schema_name: str) -> ValidationResult:
        """
        Raises:
            SchemaNotFoundError: nothing was ever generated under ``schema_name``
            InvalidJSONError:    ``response_body`` is malformed JSON text
        """
        cached = self.cache.get(schema_name)
        if cached is None:
            raise SchemaNotFoundError(schema_name)

        data = parse_response_body(response_body)
        result = self._validate(data, cached)
        if result.errors:
            logger.warning(f"🚨 CONTRACT DRIFT [{schema_name}]: {format_validation_summary(result)}")
        return result

    def compare_schemas(self, response_a: Any, response_b: Any) -> SchemaComparison:
        """
        Is response B compatible with the shape of response A?
        Compatible means zero errors; extra fields (warnings) are additive.
        """
        _, schema_a = self._schema_for(response_a)
        data_b, schema_b = self._schema_for(response_b)

        errors, warnings = validate_against_schema(data_b, schema_a, max_depth=self.max_depth)
        return SchemaComparison(errors, warnings, schema_a, schema_b)

    # ── Type definition diff ─────────────────────────────────────────────────

    def compare_type_definitions(self, before: str, after: str) -> SchemaDiff:
        return compare_type_definitions(before, after)

    def detailed_type_changes(self, before: str, after: str) -> List[DetailedChange]:
        return detailed_type_changes(before, after)

    # ── Cache access ─────────────────────────────────────────────────────────

    def get_cached_schema(self, schema_name: str) -> Optional[SchemaNode]:
        return self.cache.get(schema_name)

    def clear_cache(self) -> int:
        count = self.cache.clear()
        logger.info(f"🧹 Cleared {count} cached schema(s)")
        return count

    def list_cached_schema_names(self) -> List[str]:
        return self.cache.names()
