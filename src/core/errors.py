"""
Usage Errors
=============
Failures that mean the caller did something wrong (bad JSON text, unknown
cached schema name, absurdly deep input). Structural drift is NEVER raised;
it is reported as data in a ValidationResult.
"""


class SchemaUsageError(Exception):
    """Base class for every error the schema engine raises on purpose."""


class InvalidJSONError(SchemaUsageError, ValueError):
    """Raw response text could not be parsed as JSON."""


class SchemaNotFoundError(SchemaUsageError, LookupError):
    """No schema has been cached under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No cached schema found for: {name}")


class SchemaDepthError(SchemaUsageError):
    """Input nesting exceeded the configured SCHEMA_MAX_DEPTH."""

    def __init__(self, max_depth: int, path: str = ""):
        self.max_depth = max_depth
        self.path = path
        location = f" at '{path}'" if path else ""
        super().__init__(f"Nesting deeper than {max_depth} levels{location}")


class UnsupportedValueError(SchemaUsageError, TypeError):
    """A value that cannot appear in parsed JSON (sets, objects, bytes, ...)."""


class InvalidFormatError(SchemaUsageError, ValueError):
    """Unknown render format requested."""
