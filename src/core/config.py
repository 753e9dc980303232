"""
Configuration
==============
All runtime settings come from environment variables. A `.env` file at the
project root is loaded first so local development needs no exports.

  SCHEMA_MAX_DEPTH      : deepest nesting accepted by generation/validation
  SCHEMA_DEFAULT_FORMAT : "multiline" or "inline" type rendering
  SCHEMA_CACHE_PATH     : optional JSON snapshot file for the schema cache
  LOG_LEVEL             : root logging level for the server
  CORS_ORIGINS          : comma-separated allowed origins ("*" = any)
"""

import os
import logging

from dotenv import load_dotenv

logger = logging.getLogger("schema_platform")

# Explicitly load from the project root (one level above src/)
_project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
_env_path = os.path.join(_project_root, ".env")
load_dotenv(dotenv_path=_env_path)


def _int_env(key: str, default: int) -> int:
    raw = os.environ.get(key, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"⚠️ {key}={raw!r} is not an integer, using {default}")
        return default
    if value < 1:
        logger.warning(f"⚠️ {key} must be positive, using {default}")
        return default
    return value


# ── Engine ──
SCHEMA_MAX_DEPTH: int = _int_env("SCHEMA_MAX_DEPTH", 200)
SCHEMA_DEFAULT_FORMAT: str = os.environ.get("SCHEMA_DEFAULT_FORMAT", "multiline").strip().lower() or "multiline"

# ── Cache persistence (empty = memory only) ──
SCHEMA_CACHE_PATH: str = os.environ.get("SCHEMA_CACHE_PATH", "")

# ── Server ──
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]
