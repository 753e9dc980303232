"""
Global State
=============
The single process-wide service instance used by the HTTP layer.
Centralizing it prevents circular imports and makes the shared cache explicit.
Tests build their own SchemaValidationService instead of using this one.
"""

from core import config
from services.schema_validation import SchemaValidationService
from utils.schema_registry import SchemaCache

# ── Schema Cache (optionally persisted) ──
schema_cache = SchemaCache(persist_path=config.SCHEMA_CACHE_PATH or None)

# ── Validation Service ──
schema_service = SchemaValidationService(cache=schema_cache)
