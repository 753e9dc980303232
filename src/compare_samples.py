"""
Compare two saved API responses and print a compatibility report.

    python compare_samples.py data/reference.json data/candidate.json

Exit codes: 0 compatible, 1 breaking drift, 2 unreadable input.
"""

import sys

from core.errors import SchemaUsageError
from services.schema_validation import SchemaValidationService
from utils.drift_detector import ValidationResult, narrate_validation
from utils.type_exporter import render_type_definition


def compare_files(reference_path: str, candidate_path: str) -> int:
    try:
        with open(reference_path, "r") as f:
            reference = f.read()
        with open(candidate_path, "r") as f:
            candidate = f.read()
    except OSError as e:
        print(f"Error: {e}")
        return 2

    service = SchemaValidationService()
    try:
        comparison = service.compare_schemas(reference, candidate)
    except SchemaUsageError as e:
        print(f"Error: {e}")
        return 2

    print(render_type_definition("Reference", comparison.schema_a))
    print()
    result = ValidationResult(comparison.errors, comparison.warnings)
    print(narrate_validation(result, candidate_path))
    return 0 if comparison.is_compatible else 1


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    sys.exit(compare_files(sys.argv[1], sys.argv[2]))
