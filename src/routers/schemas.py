"""
Schemas Router
===============
HTTP surface over the schema validation service: generate + cache type
definitions, validate responses, compare samples, diff type definitions.

Response values in request bodies may be JSON structures or raw JSON text.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request

import core.state as state
from core.errors import SchemaNotFoundError, SchemaUsageError
from services.schema_validation import SchemaValidationService
from utils.drift_detector import narrate_validation
from utils.type_diff import format_type_diff

logger = logging.getLogger("schema_platform")

router = APIRouter()


def get_schema_service() -> SchemaValidationService:
    return state.schema_service


async def _read_body(request: Request, *required: str) -> Dict[str, Any]:
    try:
        data = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be JSON")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    missing = [key for key in required if key not in data]
    if missing:
        raise HTTPException(status_code=400, detail=f"Missing field(s): {', '.join(missing)}")
    return data


def _usage_error(e: SchemaUsageError) -> HTTPException:
    if isinstance(e, SchemaNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    logger.warning(f"⚠️ Rejected schema request: {e}")
    return HTTPException(status_code=400, detail=str(e))


# ── Cached schemas ──

@router.get("/schemas")
async def list_schemas(service: SchemaValidationService = Depends(get_schema_service)):
    """Names of all cached schemas."""
    return {"names": service.list_cached_schema_names()}


@router.delete("/schemas")
async def clear_schemas(service: SchemaValidationService = Depends(get_schema_service)):
    """Drop every cached schema."""
    return {"status": "cleared", "schemas_cleared": service.clear_cache()}


@router.get("/schemas/{name}")
async def get_schema(name: str, service: SchemaValidationService = Depends(get_schema_service)):
    schema = service.get_cached_schema(name)
    if schema is None:
        raise HTTPException(status_code=404, detail=f"No cached schema found for: {name}")
    return {"name": name, "schema": schema.to_dict()}


@router.post("/schemas/{name}/type-definition")
async def generate_type_definition(
    name: str,
    request: Request,
    service: SchemaValidationService = Depends(get_schema_service),
):
    """
    Generate a type definition from a sample response and cache its schema.

    Body:
        response: any : sample response (JSON value or JSON text)
        format:   str : 'multiline' | 'inline' (default: configured format)
    """
    data = await _read_body(request, "response")
    try:
        schema, definition = service.generate_and_cache(data["response"], name, data.get("format"))
    except SchemaUsageError as e:
        raise _usage_error(e)
    return {
        "name": name,
        "type_definition": definition,
        "schema": schema.to_dict(),
    }


@router.post("/schemas/{name}/learn")
async def learn_schema(
    name: str,
    request: Request,
    service: SchemaValidationService = Depends(get_schema_service),
):
    """
    Merge one more observed response into the cached schema, reporting the
    drift it introduced against the previous schema.
    """
    data = await _read_body(request, "response")
    try:
        schema, result = service.learn_response(name, data["response"])
    except SchemaUsageError as e:
        raise _usage_error(e)
    return {
        "name": name,
        "schema": schema.to_dict(),
        "validation": result.to_dict() if result is not None else None,
    }


@router.post("/schemas/{name}/validate")
async def validate_against_cached(
    name: str,
    request: Request,
    service: SchemaValidationService = Depends(get_schema_service),
):
    """Validate a response against the schema cached under ``name``."""
    data = await _read_body(request, "response")
    try:
        result = service.validate_against_cached_schema(data["response"], name)
    except SchemaUsageError as e:
        raise _usage_error(e)
    payload = result.to_dict()
    payload["narrative"] = narrate_validation(result, name)
    return payload


# ── Ad-hoc comparisons ──

@router.post("/validate")
async def validate_response(request: Request, service: SchemaValidationService = Depends(get_schema_service)):
    """
    Validate ``candidate`` against the schema of ``reference``.
    Always answers with a result, even when either input is malformed JSON.
    """
    data = await _read_body(request, "candidate", "reference")
    return service.validate_response(data["candidate"], data["reference"]).to_dict()


@router.post("/compare")
async def compare_samples(request: Request, service: SchemaValidationService = Depends(get_schema_service)):
    """Is ``sample_b`` compatible with the shape of ``sample_a``?"""
    data = await _read_body(request, "sample_a", "sample_b")
    try:
        comparison = service.compare_schemas(data["sample_a"], data["sample_b"])
    except SchemaUsageError as e:
        raise _usage_error(e)
    return comparison.to_dict()


@router.post("/type-diff")
async def diff_type_definitions(request: Request, service: SchemaValidationService = Depends(get_schema_service)):
    """Diff two rendered type definitions (``before`` → ``after``)."""
    data = await _read_body(request, "before", "after")
    before, after = data["before"], data["after"]
    if not isinstance(before, str) or not isinstance(after, str):
        raise HTTPException(status_code=400, detail="'before' and 'after' must be type definition strings")

    changes = service.detailed_type_changes(before, after)
    return {
        "diff": service.compare_type_definitions(before, after).to_dict(),
        "changes": [c.to_dict() for c in changes],
        "report": format_type_diff(changes),
    }
